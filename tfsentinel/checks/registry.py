"""
Check registry.

A CheckRegistry is built once, before scanning, and handed to the Scanner.
It keeps checks in registration order so scan output is deterministic, and
refuses duplicate codes. There is no way to remove a check: build a new
registry with the checks you want instead.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from ..errors import DuplicateCheckError
from .base import Check

logger = logging.getLogger(__name__)


class CheckRegistry:
    """Ordered collection of checks keyed by code"""

    def __init__(self, checks: Iterable[Check] = ()):
        self._checks: Dict[str, Check] = {}
        for check in checks:
            self.register(check)

    def register(self, check: Check) -> Check:
        """
        Add a check.

        Raises:
            ValueError: the check has no code.
            DuplicateCheckError: a check with the same code is already registered.
        """
        if not check.code:
            raise ValueError(f"{type(check).__name__} has no code")
        if check.code in self._checks:
            raise DuplicateCheckError(check.code)

        self._checks[check.code] = check
        logger.debug(f"Registered check {check.code}: {type(check).__name__}")
        return check

    def all(self) -> Tuple[Check, ...]:
        """All checks in registration order."""
        return tuple(self._checks.values())

    def get(self, code: str) -> Optional[Check]:
        return self._checks.get(code)

    def codes(self) -> List[str]:
        return list(self._checks)

    def __len__(self) -> int:
        return len(self._checks)

    def __iter__(self) -> Iterator[Check]:
        return iter(self.all())

    def __contains__(self, code: object) -> bool:
        return code in self._checks
