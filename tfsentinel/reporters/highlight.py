"""
Source context for text reports.

Given a result's range, pick the lines around it (three either side,
clamped to the file) and mark which of them are inside the range.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..models import Range

logger = logging.getLogger(__name__)

CONTEXT_LINES = 3


@dataclass(frozen=True)
class SourceLine:
    number: int
    text: str
    highlighted: bool
    annotation: str = ""


def context_window(span: Range, line_count: int, padding: int = CONTEXT_LINES) -> Optional[Tuple[int, int]]:
    """
    First and last line number (inclusive) to show for a range.

    Returns None when there is nothing to show, i.e. the file is empty or
    the range starts past its end.
    """
    start = max(1, span.start_line - padding)
    end = min(line_count, span.end_line + padding)
    if start > end:
        return None
    return start, end


def highlight_lines(span: Range, lines: List[str], annotation: str = "",
                    padding: int = CONTEXT_LINES) -> List[SourceLine]:
    """Context lines for a range; `lines` holds the file content, line 1 first."""
    window = context_window(span, len(lines), padding)
    if window is None:
        return []

    start, end = window
    result = []
    for number in range(start, end + 1):
        highlighted = span.contains_line(number)
        result.append(SourceLine(
            number=number,
            text=lines[number - 1],
            highlighted=highlighted,
            annotation=annotation if number == span.start_line else "",
        ))
    return result


class SourceCache:
    """Reads each reported file once"""

    def __init__(self):
        self._files: Dict[str, Optional[List[str]]] = {}

    def lines(self, filename: str) -> Optional[List[str]]:
        if filename not in self._files:
            self._files[filename] = read_source_lines(filename)
        return self._files[filename]


def read_source_lines(filename: str) -> Optional[List[str]]:
    """File content split into lines, or None if it can't be read."""
    for encoding in ('utf-8', 'latin-1'):
        try:
            with open(filename, 'r', encoding=encoding) as f:
                return f.read().splitlines()
        except UnicodeDecodeError:
            continue
        except OSError as e:
            logger.debug(f"Cannot read {filename} for context: {e}")
            return None
    return None
