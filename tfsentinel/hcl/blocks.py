"""
Block tree produced by the parser.

A Block owns its attributes and child blocks. The link back to the parent
is a weak reference: it answers "am I nested inside X" questions but never
keeps the parent alive. The list returned by the parser owns the tree.
"""

from __future__ import annotations

import weakref
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..models import Range
from .values import Value


@dataclass(frozen=True)
class Attribute:
    """A `name = value` assignment inside a block"""
    name: str
    value: Value
    range: Range


class Block:
    """A typed, labelled declaration such as `resource "aws_s3_bucket" "logs" { ... }`"""

    def __init__(self, kind: str, labels: Sequence[str], range: Range,
                 parent: Optional[Block] = None):
        self.kind = kind
        self.labels: Tuple[str, ...] = tuple(labels)
        self._range = range
        self._attributes: Dict[str, Attribute] = {}
        self._children: List[Block] = []
        self._parent = weakref.ref(parent) if parent is not None else None

    def __repr__(self) -> str:
        return f"Block({self.full_name!r}, {self._range})"

    @property
    def range(self) -> Range:
        return self._range

    @property
    def attributes(self) -> Mapping[str, Attribute]:
        return MappingProxyType(self._attributes)

    @property
    def children(self) -> Tuple[Block, ...]:
        return tuple(self._children)

    @property
    def parent(self) -> Optional[Block]:
        return self._parent() if self._parent is not None else None

    @property
    def type_label(self) -> Optional[str]:
        """First label, e.g. the resource type of a resource block."""
        return self.labels[0] if self.labels else None

    @property
    def full_name(self) -> str:
        """
        Dotted name used in messages.

        Resources are named the way Terraform addresses them
        (`aws_s3_bucket.logs`); other blocks are prefixed with their kind
        (`variable.password`, `provider.aws`).
        """
        if self.kind == 'resource' and self.labels:
            return '.'.join(self.labels)
        return '.'.join((self.kind,) + self.labels)

    def is_resource(self, *types: str) -> bool:
        return self.kind == 'resource' and self.type_label in types

    def get_attribute(self, name: str) -> Optional[Attribute]:
        return self._attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def get_block(self, kind: str) -> Optional[Block]:
        """First direct child of the given kind."""
        for child in self._children:
            if child.kind == kind:
                return child
        return None

    def get_blocks(self, kind: str) -> List[Block]:
        return [child for child in self._children if child.kind == kind]

    def ancestors(self) -> Iterator[Block]:
        """Parent, grandparent, ... up to the top-level block."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_within(self, kind: str, type_label: Optional[str] = None) -> bool:
        """True if some ancestor has the given kind (and first label)."""
        for ancestor in self.ancestors():
            if ancestor.kind == kind and (type_label is None or ancestor.type_label == type_label):
                return True
        return False

    def walk(self) -> Iterator[Block]:
        """This block, then its descendants depth first in source order."""
        yield self
        for child in self._children:
            yield from child.walk()

    # Used by the parser while the block is being built

    def _add_attribute(self, attribute: Attribute) -> None:
        self._attributes[attribute.name] = attribute

    def _add_child(self, child: Block) -> None:
        if child.parent is not self:
            raise ValueError(f"{child!r} was not created with {self!r} as its parent")
        self._children.append(child)

    def _close(self, end_line: int) -> None:
        self._range = Range(self._range.filename, self._range.start_line, end_line)


def walk_blocks(blocks: Iterable[Block]) -> Iterator[Block]:
    """Depth-first pre-order traversal over a list of top-level blocks."""
    for block in blocks:
        yield from block.walk()
