"""
Data models for tfsentinel.

- Severity: how serious a finding is
- Range: where in the source a block, attribute or finding lives
- Result: a single finding produced by a check

Ranges and results are immutable once created.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def priority(self) -> int:
        priorities = {
            Severity.ERROR: 3,
            Severity.WARNING: 2,
            Severity.INFO: 1,
        }
        return priorities[self]

    @classmethod
    def from_string(cls, value: str) -> "Severity":
        """Look up a severity by name, case-insensitively."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown severity '{value}' (expected one of: {valid})") from None


@dataclass(frozen=True)
class Range:
    """A span of whole lines in a single file, 1-indexed and inclusive."""
    filename: str
    start_line: int
    end_line: int

    def __post_init__(self) -> None:
        if not self.filename:
            raise ValueError("Range filename must not be empty")
        if self.start_line < 1:
            raise ValueError(f"Range start line must be >= 1, got {self.start_line}")
        if self.end_line < self.start_line:
            raise ValueError(
                f"Range end line {self.end_line} is before start line {self.start_line}"
            )

    def __str__(self) -> str:
        if self.start_line == self.end_line:
            return f"{self.filename}:{self.start_line}"
        return f"{self.filename}:{self.start_line}-{self.end_line}"

    def contains_line(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line

    def to_dict(self) -> Dict[str, Any]:
        return {
            'Filename': self.filename,
            'StartLine': self.start_line,
            'EndLine': self.end_line,
        }


@dataclass(frozen=True)
class Result:
    """A finding emitted by a check"""
    code: str
    description: str
    range: Range
    severity: Severity
    range_annotation: str = ""

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("Result code must not be empty")
        if not self.description:
            raise ValueError("Result description must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to the dictionary written by JSON output"""
        return {
            'Code': self.code,
            'Description': self.description,
            'Range': self.range.to_dict(),
            'RangeAnnotation': self.range_annotation,
            'Severity': self.severity.value,
        }
