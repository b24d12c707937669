"""
Base classes for tfsentinel checks.

A check looks at one Block at a time and returns the findings for it:
- Check: the general interface; `apply` decides itself which blocks matter
- ResourceCheck: a check restricted to `resource` blocks of given types

Checks must not keep state between calls; the same tree always gives the
same results.
"""

import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple, Union

from ..hcl.blocks import Attribute, Block
from ..models import Result, Severity

# Attribute/variable names that usually hold credentials
_SENSITIVE_NAME_RE = re.compile(
    r'^(?:.*[_-])?(?:password|passwd|pass|secret|token|api_?key|private_?key|'
    r'access_?key|secret_?key|client_secret|credentials?)$',
    re.IGNORECASE,
)


def is_sensitive_name(name: str) -> bool:
    return bool(_SENSITIVE_NAME_RE.match(name))


def is_public_cidr(cidr: str) -> bool:
    """True for CIDR blocks covering the whole address space, e.g. 0.0.0.0/0 or ::/0."""
    return cidr.strip().endswith('/0')


class Check(ABC):
    """Interface every check implements"""

    code: str = ""
    description: str = ""
    severity: Severity = Severity.WARNING
    provider: str = "general"

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code}>"

    @abstractmethod
    def apply(self, block: Block) -> List[Result]:
        """Return the findings for a single block (empty if it does not apply)."""

    def result(self, location: Union[Block, Attribute], description: Optional[str] = None,
               annotation: str = "", severity: Optional[Severity] = None) -> Result:
        """Build a Result pointing at a block or one of its attributes."""
        return Result(
            code=self.code,
            description=description or self.description,
            range=location.range,
            severity=severity or self.severity,
            range_annotation=annotation,
        )


class ResourceCheck(Check):
    """Check that only looks at `resource` blocks of the listed types"""

    resource_types: Tuple[str, ...] = ()

    def apply(self, block: Block) -> List[Result]:
        if not block.is_resource(*self.resource_types):
            return []
        return self.check_resource(block)

    @abstractmethod
    def check_resource(self, block: Block) -> List[Result]:
        """Inspect a resource block of one of the listed types."""
