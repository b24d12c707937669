"""
Exception types for tfsentinel.

Everything that should stop a run derives from TfSentinelError so the CLI
can report it in one place:
- InputError: the target directory or one of its files cannot be read
- ParseError: a configuration file is not valid HCL
- ConfigError: the tfsentinel configuration file is invalid
- DuplicateCheckError: two checks were registered under the same code
"""

from typing import Optional


class TfSentinelError(Exception):
    """Base exception for tfsentinel errors."""


class InputError(TfSentinelError):
    """A path could not be used as scan input."""

    def __init__(self, message: str, path: str = ""):
        self.message = message
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)


class ParseError(TfSentinelError):
    """Syntax error in a configuration file."""

    def __init__(self, message: str, filename: str, line: int, column: Optional[int] = None):
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column
        location = f"{filename}:{line}"
        if column is not None:
            location += f":{column}"
        super().__init__(f"{location}: {message}")


class ConfigError(TfSentinelError):
    """Invalid tfsentinel configuration."""


class DuplicateCheckError(TfSentinelError, ValueError):
    """A check code was registered twice."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Check {code} is already registered")
