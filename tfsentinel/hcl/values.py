"""
Value model for attribute expressions.

Only literal values and lists/maps built from them are resolved. Anything
that would need evaluation (references, function calls, operators,
conditionals, templates with interpolation, for expressions, null) becomes
UNRESOLVED. Checks must treat UNRESOLVED as "cannot determine": the typed
accessors return None for it, so it never compares equal to a concrete value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from .lexer import CLOSERS, OPENERS, Token, TokenType

Number = Union[int, float]


class ValueKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Value:
    """A resolved literal, or the UNRESOLVED marker"""
    kind: ValueKind
    raw: Any = None

    @classmethod
    def string(cls, value: str) -> Value:
        return cls(ValueKind.STRING, value)

    @classmethod
    def number(cls, value: Number) -> Value:
        return cls(ValueKind.NUMBER, value)

    @classmethod
    def boolean(cls, value: bool) -> Value:
        return cls(ValueKind.BOOL, value)

    @classmethod
    def list(cls, items: Sequence[Value]) -> Value:
        return cls(ValueKind.LIST, tuple(items))

    @classmethod
    def map(cls, items: Dict[str, Value]) -> Value:
        return cls(ValueKind.MAP, dict(items))

    @property
    def is_resolved(self) -> bool:
        return self.kind is not ValueKind.UNRESOLVED

    def as_str(self) -> Optional[str]:
        return self.raw if self.kind is ValueKind.STRING else None

    def as_number(self) -> Optional[Number]:
        return self.raw if self.kind is ValueKind.NUMBER else None

    def as_bool(self) -> Optional[bool]:
        return self.raw if self.kind is ValueKind.BOOL else None

    def as_list(self) -> Optional[List[Value]]:
        return list(self.raw) if self.kind is ValueKind.LIST else None

    def as_map(self) -> Optional[Dict[str, Value]]:
        return dict(self.raw) if self.kind is ValueKind.MAP else None

    def strings(self) -> List[str]:
        """
        Concrete strings held by this value.

        A string gives itself, a list gives its string elements; unresolved
        elements and everything else are skipped.
        """
        if self.kind is ValueKind.STRING:
            return [self.raw]
        if self.kind is ValueKind.LIST:
            return [item.raw for item in self.raw if item.kind is ValueKind.STRING]
        return []

    def equals(self, other: Any) -> bool:
        """Compare against a plain Python value. Never true when unresolved."""
        if isinstance(other, bool):
            return self.kind is ValueKind.BOOL and self.raw is other
        if isinstance(other, (int, float)):
            return self.kind is ValueKind.NUMBER and self.raw == other
        if isinstance(other, str):
            return self.kind is ValueKind.STRING and self.raw == other
        return False

    def to_native(self) -> Any:
        """Convert to plain Python data; UNRESOLVED becomes None."""
        if self.kind is ValueKind.LIST:
            return [item.to_native() for item in self.raw]
        if self.kind is ValueKind.MAP:
            return {key: item.to_native() for key, item in self.raw.items()}
        return self.raw

    def __str__(self) -> str:
        if self.kind is ValueKind.STRING:
            return f'"{self.raw}"'
        if self.kind is ValueKind.BOOL:
            return 'true' if self.raw else 'false'
        if self.kind is ValueKind.NUMBER:
            return str(self.raw)
        if self.kind is ValueKind.LIST:
            return '[' + ', '.join(str(item) for item in self.raw) + ']'
        if self.kind is ValueKind.MAP:
            return '{' + ', '.join(f'{key} = {item}' for key, item in self.raw.items()) + '}'
        return '<unresolved>'


UNRESOLVED = Value(ValueKind.UNRESOLVED)


def resolve(tokens: Sequence[Token]) -> Value:
    """
    Resolve the tokens of one expression into a Value.

    Never raises: syntax this function does not understand yields
    UNRESOLVED, as do constructs that need evaluation.
    """
    return _resolve(_strip_newlines(list(tokens)))


def _resolve(tokens: List[Token]) -> Value:
    if not tokens:
        return UNRESOLVED

    first = tokens[0]
    if len(tokens) == 1:
        return _literal(first)

    if (len(tokens) == 2 and first.type is TokenType.OPERATOR and first.value == '-'
            and tokens[1].type is TokenType.NUMBER):
        return Value.number(-_parse_number(tokens[1].value))

    if first.type not in OPENERS or _matching_close(tokens, 0) != len(tokens) - 1:
        return UNRESOLVED

    inner = tokens[1:-1]
    if first.type is TokenType.LBRACKET:
        return _resolve_list(inner)
    if first.type is TokenType.LBRACE:
        return _resolve_map(inner)
    return _resolve(_strip_newlines(inner))


def _literal(token: Token) -> Value:
    if token.type in (TokenType.STRING, TokenType.HEREDOC):
        return UNRESOLVED if token.templated else Value.string(token.value)
    if token.type is TokenType.NUMBER:
        return Value.number(_parse_number(token.value))
    if token.type is TokenType.IDENT and token.value in ('true', 'false'):
        return Value.boolean(token.value == 'true')
    # null, bare references and everything else
    return UNRESOLVED


def _resolve_list(inner: List[Token]) -> Value:
    stripped = _strip_newlines(inner)
    if not stripped:
        return Value.list([])
    if _is_for_expression(stripped):
        return UNRESOLVED

    parts = _split_top_level(inner, {TokenType.COMMA})
    items: List[Value] = []
    for index, part in enumerate(parts):
        part = _strip_newlines(part)
        if not part:
            if index == len(parts) - 1:
                continue  # trailing comma
            return UNRESOLVED
        items.append(_resolve(part))
    return Value.list(items)


def _resolve_map(inner: List[Token]) -> Value:
    stripped = _strip_newlines(inner)
    if _is_for_expression(stripped):
        return UNRESOLVED

    items: Dict[str, Value] = {}
    for entry in _split_top_level(inner, {TokenType.COMMA, TokenType.NEWLINE}):
        entry = _strip_newlines(entry)
        if not entry:
            continue
        if len(entry) < 3 or entry[1].type not in (TokenType.EQUALS, TokenType.COLON):
            return UNRESOLVED
        key = _map_key(entry[0])
        if key is None:
            return UNRESOLVED
        items[key] = _resolve(entry[2:])
    return Value.map(items)


def _map_key(token: Token) -> Optional[str]:
    if token.type is TokenType.IDENT or token.type is TokenType.NUMBER:
        return token.value
    if token.type is TokenType.STRING and not token.templated:
        return token.value
    return None


def _is_for_expression(tokens: List[Token]) -> bool:
    return bool(tokens) and tokens[0].type is TokenType.IDENT and tokens[0].value == 'for'


def _parse_number(text: str) -> Number:
    if any(c in text for c in '.eE'):
        return float(text)
    return int(text)


def _strip_newlines(tokens: List[Token]) -> List[Token]:
    start, end = 0, len(tokens)
    while start < end and tokens[start].type is TokenType.NEWLINE:
        start += 1
    while end > start and tokens[end - 1].type is TokenType.NEWLINE:
        end -= 1
    return tokens[start:end]


def _matching_close(tokens: List[Token], start: int) -> Optional[int]:
    """Index of the bracket closing tokens[start], or None if unbalanced."""
    stack: List[TokenType] = []
    for index in range(start, len(tokens)):
        token_type = tokens[index].type
        if token_type in OPENERS:
            stack.append(token_type)
        elif token_type in CLOSERS:
            if not stack or stack[-1] is not CLOSERS[token_type]:
                return None
            stack.pop()
            if not stack:
                return index
    return None


def _split_top_level(tokens: List[Token], separators: Set[TokenType]) -> List[List[Token]]:
    parts: List[List[Token]] = [[]]
    depth = 0
    for token in tokens:
        if token.type in OPENERS:
            depth += 1
        elif token.type in CLOSERS:
            depth -= 1
        if depth == 0 and token.type in separators:
            parts.append([])
        else:
            parts[-1].append(token)
    return parts
