"""
Inline ignore directives.

A comment such as

    acl = "public-read" # tfsentinel:ignore:AWS001

suppresses AWS001 results whose range covers the comment's line, or which
start on the line right after it (so a comment above a block covers the
block). `tfsentinel:ignore:*`, or the bare `tfsentinel:ignore`, suppresses
every check.
"""

import re
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Set

from .models import Result

if TYPE_CHECKING:
    from .hcl.lexer import Comment

_IGNORE_RE = re.compile(
    r'\btfsentinel:ignore(?![\w-])'
    r'(?::\s*(\*|[A-Za-z0-9_-]+(?:\s*,\s*[A-Za-z0-9_-]+)*))?',
    re.IGNORECASE,
)


def parse_ignore(comment: str) -> Optional[Set[str]]:
    """
    Parse an ignore directive from comment text.

    Returns:
        None if no directive found, or if the code list after the colon
        cannot be read.
        Empty set if the directive suppresses all checks.
        Set of upper-cased check codes otherwise.
    """
    m = _IGNORE_RE.search(comment)
    if not m:
        return None

    codes = m.group(1)
    if codes is None and comment[m.end():].startswith(':'):
        return None
    if not codes or codes == '*':
        return set()
    return {code.strip().upper() for code in codes.split(',') if code.strip()}


class IgnoreIndex:
    """Ignore directives per file and line"""

    def __init__(self):
        self._by_file: Dict[str, Dict[int, Set[str]]] = {}

    def __len__(self) -> int:
        return sum(len(lines) for lines in self._by_file.values())

    def add(self, filename: str, line: int, codes: Set[str]) -> None:
        lines = self._by_file.setdefault(filename, {})
        existing = lines.get(line)
        if existing is None:
            lines[line] = set(codes)
        elif not existing or not codes:
            lines[line] = set()  # one of them suppresses everything
        else:
            existing.update(codes)

    def add_comments(self, filename: str, comments: Iterable["Comment"]) -> None:
        for comment in comments:
            codes = parse_ignore(comment.text)
            if codes is not None:
                self.add(filename, comment.end_line, codes)

    def is_ignored(self, result: Result) -> bool:
        lines = self._by_file.get(result.range.filename)
        if not lines:
            return False

        first = result.range.start_line - 1
        last = result.range.end_line
        code = result.code.upper()
        for line, codes in lines.items():
            if first <= line <= last and (not codes or code in codes):
                return True
        return False
