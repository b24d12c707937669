"""
Scanner - applies registered checks to a parsed Block tree
"""

import logging
import time
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .checks import default_registry
from .checks.base import Check
from .checks.registry import CheckRegistry
from .hcl.blocks import Block, walk_blocks
from .hcl.parser import Parser
from .ignores import IgnoreIndex
from .models import Result, Severity

logger = logging.getLogger(__name__)


class Scanner:
    """Runs every check in a registry over every block of a tree"""

    def __init__(self, registry: CheckRegistry, ignores: Optional[IgnoreIndex] = None):
        self.registry = registry
        self.ignores = ignores
        self.last_duration_seconds = 0.0

    def scan(self, blocks: Iterable[Block]) -> List[Result]:
        """
        Scan a list of top-level blocks.

        Blocks are visited depth first in source order. Results are grouped
        by check, in registration order, and within a check follow the
        traversal order. A check that raises is skipped for that block only.

        Returns:
            List of results, empty when nothing was found
        """
        start_time = time.time()
        checks = self.registry.all()
        found: Dict[str, List[Result]] = {check.code: [] for check in checks}

        visited = 0
        for block in walk_blocks(blocks):
            visited += 1
            for check in checks:
                found[check.code].extend(self._apply(check, block))

        results: List[Result] = []
        for check in checks:
            results.extend(found[check.code])

        if self.ignores is not None and len(self.ignores):
            kept = [r for r in results if not self.ignores.is_ignored(r)]
            ignored = len(results) - len(kept)
            if ignored:
                logger.info(f"Ignored {ignored} results marked with tfsentinel:ignore")
            results = kept

        self.last_duration_seconds = time.time() - start_time
        logger.info(
            f"Scan complete: {len(results)} results from {len(checks)} checks "
            f"over {visited} blocks in {self.last_duration_seconds:.2f}s"
        )
        return results

    def _apply(self, check: Check, block: Block) -> List[Result]:
        try:
            return list(check.apply(block))
        except Exception as e:
            logger.warning(f"Check {check.code} failed on {block.full_name} ({block.range}): {e}")
            return []


def create_scanner(exclude: Optional[Iterable[str]] = None,
                   minimum_severity: Optional[str] = None,
                   ignores: Optional[IgnoreIndex] = None) -> Scanner:
    """Factory function to create a scanner over the built-in checks

    Args:
        exclude: Check codes to leave out
        minimum_severity: Lowest severity to check for (error, warning, info)
        ignores: Ignore directives collected by the parser

    Returns:
        Configured Scanner instance
    """
    severity = Severity.from_string(minimum_severity) if minimum_severity else None
    registry = default_registry(exclude=exclude, minimum_severity=severity)
    return Scanner(registry, ignores=ignores)


def scan_directory(path: Union[str, Path], registry: Optional[CheckRegistry] = None,
                   max_workers: int = 1) -> List[Result]:
    """
    Parse a directory and scan it.

    Uses the built-in checks when no registry is given. Ignore directives
    found while parsing are honoured.

    Raises:
        InputError, ParseError: the directory could not be parsed; nothing is scanned.
    """
    parser = Parser(max_workers=max_workers)
    blocks = parser.parse_directory(path)
    if registry is None:
        registry = default_registry()
    return Scanner(registry, ignores=parser.ignores).scan(blocks)
