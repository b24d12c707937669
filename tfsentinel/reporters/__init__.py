"""
Report Generators for tfsentinel
"""

import json
import sys
from typing import List, Optional

from ..models import Result
from .highlight import SourceCache, SourceLine, context_window, highlight_lines, read_source_lines
from .sarif import SARIFReporter, generate_sarif


class BaseReporter:
    """Base class for reporters"""

    def report(self, results: List[Result], output: Optional[str] = None) -> str:
        """Generate report and optionally write to file"""
        raise NotImplementedError

    def _write_output(self, content: str, output: Optional[str]) -> None:
        """Write content to file or stdout"""
        if output:
            with open(output, 'w', encoding='utf-8') as f:
                f.write(content)
        else:
            print(content)


class ConsoleReporter(BaseReporter):
    """Terminal output with source context, colored when writing to a tty"""

    COLORS = {
        'error': '\033[91m',     # Red
        'warning': '\033[93m',   # Yellow
        'info': '\033[94m',      # Blue
        'red': '\033[91m',
        'yellow': '\033[93m',
        'blue': '\033[94m',
        'green': '\033[92m',
        'reset': '\033[0m',
        'bold': '\033[1m',
        'underline': '\033[4m',
    }

    def __init__(self, use_colors: bool = True, verbose: bool = False):
        self.use_colors = use_colors and sys.stdout.isatty()
        self.verbose = verbose
        self.sources = SourceCache()

    def _color(self, text: str, color: str) -> str:
        """Apply color to text if colors enabled"""
        if not self.use_colors:
            return text
        return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"

    def report(self, results: List[Result], output: Optional[str] = None) -> str:
        """Generate console report"""
        lines = []

        if not results:
            lines.append("")
            lines.append(self._color("No problems detected!", 'green'))
            lines.append("")
        else:
            lines.append("")
            lines.append(self._color(f"{len(results)} potential problems detected:", 'red'))
            lines.append("")
            for index, result in enumerate(results, 1):
                lines.extend(self._format_result(index, result))

        content = "\n".join(lines)
        self._write_output(content, output)
        return content

    def _format_result(self, index: int, result: Result) -> List[str]:
        lines = [
            self._color(f"Problem {index}", 'underline'),
            "",
            f"  {self._color('[', 'blue')}{result.code}{self._color(']', 'blue')} {result.description}",
            f"  {self._color(str(result.range), 'blue')}",
        ]
        if self.verbose:
            lines.append(f"  Severity: {self._color(result.severity.value.upper(), result.severity.value)}")
        lines.append("")

        source = self.sources.lines(result.range.filename)
        if source is not None:
            for line in highlight_lines(result.range, source, result.range_annotation):
                lines.append(self._format_line(line))
            lines.append("")
        return lines

    def _format_line(self, line: SourceLine) -> str:
        gutter = f"  {self._color(f'{line.number:6d}', 'blue')} | "
        if not line.highlighted:
            return gutter + self._color(line.text, 'yellow')

        text = self._color(line.text, 'red')
        if line.annotation:
            text += "    " + self._color(line.annotation, 'blue')
        return gutter + self._color(text, 'bold')


class JSONReporter(BaseReporter):
    """JSON format reporter: an array of result objects, [] when clean"""

    def __init__(self, indent: Optional[int] = None):
        self.indent = indent

    def report(self, results: List[Result], output: Optional[str] = None) -> str:
        """Generate JSON report"""
        content = json.dumps([r.to_dict() for r in results], indent=self.indent)
        self._write_output(content, output)
        return content


def get_reporter(format: str, **kwargs) -> BaseReporter:
    """Factory function to get reporter by format"""
    reporters = {
        'text': ConsoleReporter,
        'json': JSONReporter,
        'sarif': SARIFReporter,
    }

    reporter_class = reporters.get(format.lower())
    if not reporter_class:
        raise ValueError(f"Unknown report format: {format}. Supported: {list(reporters.keys())}")

    return reporter_class(**kwargs)


__all__ = [
    'BaseReporter',
    'ConsoleReporter',
    'JSONReporter',
    'SARIFReporter',
    'SourceLine',
    'context_window',
    'generate_sarif',
    'get_reporter',
    'highlight_lines',
    'read_source_lines',
]
