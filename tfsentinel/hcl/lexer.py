"""
Tokenizer for HCL native syntax.

Produces a flat token stream with line/column positions. Newlines are
significant in HCL (they terminate attributes) so they are emitted as
tokens; comments are not, but they are collected separately so that ignore
directives can be picked up later.

Template sequences inside quoted strings (``${...}`` and ``%{...}``) are
kept verbatim in the token value and flag the token as templated; they are
never evaluated.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..errors import ParseError


class TokenType(Enum):
    IDENT = "identifier"
    NUMBER = "number"
    STRING = "string"
    HEREDOC = "heredoc"
    LBRACE = "'{'"
    RBRACE = "'}'"
    LBRACKET = "'['"
    RBRACKET = "']'"
    LPAREN = "'('"
    RPAREN = "')'"
    EQUALS = "'='"
    COMMA = "','"
    COLON = "':'"
    DOT = "'.'"
    QUESTION = "'?'"
    ELLIPSIS = "'...'"
    OPERATOR = "operator"
    NEWLINE = "newline"
    EOF = "end of file"


OPENERS = {TokenType.LBRACE, TokenType.LBRACKET, TokenType.LPAREN}
CLOSERS = {
    TokenType.RBRACE: TokenType.LBRACE,
    TokenType.RBRACKET: TokenType.LBRACKET,
    TokenType.RPAREN: TokenType.LPAREN,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str
    line: int
    column: int
    end_line: int
    templated: bool = False

    def describe(self) -> str:
        """Human readable form used in syntax error messages."""
        if self.type in (TokenType.IDENT, TokenType.NUMBER, TokenType.OPERATOR):
            return f"{self.type.value} '{self.value}'"
        if self.type is TokenType.STRING:
            return f'string "{self.value}"'
        return self.type.value


@dataclass(frozen=True)
class Comment:
    text: str
    line: int
    end_line: int


_IDENT_RE = re.compile(r'[^\W\d][\w-]*')
_ESCAPED_TEMPLATE_RE = re.compile(r'([$%])\1\{')
_NUMBER_RE = re.compile(r'[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?')
_HEREDOC_RE = re.compile(r'<<(-?)([A-Za-z_][A-Za-z0-9_-]*)[ \t]*\r?\n')

_PUNCTUATION = {
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '=': TokenType.EQUALS,
    ',': TokenType.COMMA,
    ':': TokenType.COLON,
    '.': TokenType.DOT,
    '?': TokenType.QUESTION,
}

# Longest first so that '==' wins over '='
_MULTI_CHAR_OPERATORS = ('==', '!=', '<=', '>=', '&&', '||', '=>')
_SINGLE_CHAR_OPERATORS = set('+-*/%<>!')

_SIMPLE_ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '"': '"',
    '\\': '\\',
}


def contains_template(text: str) -> bool:
    """Return True if text holds an unescaped ${ or %{ sequence."""
    i = 0
    while i < len(text) - 1:
        if text.startswith('$${', i) or text.startswith('%%{', i):
            i += 3
            continue
        if text[i] in '$%' and text[i + 1] == '{':
            return True
        i += 1
    return False


def unescape_templates(text: str) -> str:
    """Turn the $${ and %%{ escapes into the literal ${ and %{ they stand for."""
    return _ESCAPED_TEMPLATE_RE.sub(r'\1{', text)


class Lexer:
    """Turns the source of one file into tokens and comments"""

    def __init__(self, source: str, filename: str):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.comments: List[Comment] = []

    def tokenize(self) -> List[Token]:
        """Tokenize the whole source. The last token is always EOF."""
        source = self.source
        while self.pos < len(source):
            ch = source[self.pos]

            if ch in ' \t\r\ufeff':
                self._advance()
            elif ch == '\n':
                self._add(TokenType.NEWLINE, '\n', self.line, self.column)
                self._advance()
            elif ch == '#' or source.startswith('//', self.pos):
                self._line_comment()
            elif source.startswith('/*', self.pos):
                self._block_comment()
            elif ch == '"':
                self._string()
            elif source.startswith('<<', self.pos):
                self._heredoc()
            elif ch in '0123456789':
                self._number()
            elif _IDENT_RE.match(source, self.pos):
                self._identifier()
            elif source.startswith('...', self.pos):
                self._add(TokenType.ELLIPSIS, '...', self.line, self.column)
                self._advance(3)
            else:
                self._punctuation(ch)

        self._add(TokenType.EOF, '', self.line, self.column)
        return self.tokens

    # -- helpers --------------------------------------------------------

    def _error(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> ParseError:
        return ParseError(
            message,
            self.filename,
            line if line is not None else self.line,
            column if column is not None else self.column,
        )

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.pos >= len(self.source):
                return
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _add(self, token_type: TokenType, value: str, line: int, column: int,
             templated: bool = False) -> None:
        self.tokens.append(Token(token_type, value, line, column, self.line, templated))

    # -- comments -------------------------------------------------------

    def _line_comment(self) -> None:
        line = self.line
        end = self.source.find('\n', self.pos)
        if end == -1:
            end = len(self.source)
        text = self.source[self.pos:end]
        self._advance(end - self.pos)
        self.comments.append(Comment(text, line, line))

    def _block_comment(self) -> None:
        line, column = self.line, self.column
        end = self.source.find('*/', self.pos + 2)
        if end == -1:
            raise self._error("Unterminated comment", line, column)
        text = self.source[self.pos:end + 2]
        self._advance(end + 2 - self.pos)
        self.comments.append(Comment(text, line, self.line))

    # -- literals -------------------------------------------------------

    def _identifier(self) -> None:
        line, column = self.line, self.column
        match = _IDENT_RE.match(self.source, self.pos)
        value = match.group(0)
        self._advance(len(value))
        self._add(TokenType.IDENT, value, line, column)

    def _number(self) -> None:
        line, column = self.line, self.column
        match = _NUMBER_RE.match(self.source, self.pos)
        value = match.group(0)
        self._advance(len(value))
        self._add(TokenType.NUMBER, value, line, column)

    def _punctuation(self, ch: str) -> None:
        line, column = self.line, self.column
        for op in _MULTI_CHAR_OPERATORS:
            if self.source.startswith(op, self.pos):
                self._advance(len(op))
                self._add(TokenType.OPERATOR, op, line, column)
                return

        if ch in _PUNCTUATION:
            self._advance()
            self._add(_PUNCTUATION[ch], ch, line, column)
        elif ch in _SINGLE_CHAR_OPERATORS:
            self._advance()
            self._add(TokenType.OPERATOR, ch, line, column)
        else:
            raise self._error(f"Unexpected character {ch!r}")

    def _string(self) -> None:
        line, column = self.line, self.column
        self._advance()  # opening quote
        chars: List[str] = []
        templated = False

        while True:
            if self.pos >= len(self.source):
                raise self._error("Unterminated string", line, column)
            ch = self.source[self.pos]

            if ch == '\n':
                raise self._error("Unterminated string", line, column)
            if ch == '"':
                self._advance()
                break
            if ch == '\\':
                chars.append(self._escape())
            elif self.source.startswith('$${', self.pos) or self.source.startswith('%%{', self.pos):
                # escaped, the value holds a literal ${ or %{
                chars.append(self.source[self.pos + 1:self.pos + 3])
                self._advance(3)
            elif self.source.startswith('${', self.pos) or self.source.startswith('%{', self.pos):
                templated = True
                chars.append(self._template_sequence())
            else:
                chars.append(ch)
                self._advance()

        self._add(TokenType.STRING, ''.join(chars), line, column, templated)

    def _escape(self) -> str:
        line, column = self.line, self.column
        self._advance()  # backslash
        if self.pos >= len(self.source):
            raise self._error("Unterminated string", line, column)

        ch = self.source[self.pos]
        if ch in _SIMPLE_ESCAPES:
            self._advance()
            return _SIMPLE_ESCAPES[ch]

        if ch in ('u', 'U'):
            width = 4 if ch == 'u' else 8
            digits = self.source[self.pos + 1:self.pos + 1 + width]
            if len(digits) != width or not all(d in '0123456789abcdefABCDEF' for d in digits):
                raise self._error(f"Invalid unicode escape sequence '\\{ch}{digits}'", line, column)
            try:
                decoded = chr(int(digits, 16))
            except ValueError:
                raise self._error(f"Invalid unicode code point '\\{ch}{digits}'", line, column) from None
            self._advance(width + 1)
            return decoded

        raise self._error(f"Invalid escape sequence '\\{ch}'", line, column)

    def _template_sequence(self) -> str:
        """Consume ${ ... } or %{ ... } including nested braces and strings."""
        line, column = self.line, self.column
        start = self.pos
        self._advance(2)
        depth = 1

        while depth > 0:
            if self.pos >= len(self.source):
                raise self._error("Unterminated template sequence", line, column)
            ch = self.source[self.pos]
            if ch == '"':
                self._skip_quoted()
                continue
            if ch == '{':
                depth += 1
            elif ch == '}':
                depth -= 1
            self._advance()

        return self.source[start:self.pos]

    def _skip_quoted(self) -> None:
        """Skip a string literal nested inside a template sequence."""
        line, column = self.line, self.column
        self._advance()
        while True:
            if self.pos >= len(self.source) or self.source[self.pos] == '\n':
                raise self._error("Unterminated string", line, column)
            ch = self.source[self.pos]
            if ch == '"':
                self._advance()
                return
            if ch == '\\':
                self._advance(2)
            elif self.source.startswith('${', self.pos) or self.source.startswith('%{', self.pos):
                self._template_sequence()
            else:
                self._advance()

    def _heredoc(self) -> None:
        line, column = self.line, self.column
        match = _HEREDOC_RE.match(self.source, self.pos)
        if not match:
            raise self._error("Invalid heredoc: expected an identifier after '<<'")

        indented = match.group(1) == '-'
        marker = match.group(2)
        self._advance(match.end() - self.pos)

        body: List[str] = []
        while True:
            if self.pos >= len(self.source):
                raise self._error(f"Unterminated heredoc, expected closing '{marker}'", line, column)
            end = self.source.find('\n', self.pos)
            if end == -1:
                end = len(self.source)
            text = self.source[self.pos:end].rstrip('\r')
            if text.strip() == marker:
                # leave the trailing newline for the attribute terminator
                self._advance(end - self.pos)
                break
            body.append(text)
            self._advance(end - self.pos + 1)

        if indented:
            body = _dedent(body)
        value = '\n'.join(body) + '\n' if body else ''
        templated = contains_template(value)
        if not templated:
            value = unescape_templates(value)
        self._add(TokenType.HEREDOC, value, line, column, templated)


def _dedent(lines: List[str]) -> List[str]:
    indents = [len(line) - len(line.lstrip(' \t')) for line in lines if line.strip()]
    if not indents:
        return [line.strip(' \t') for line in lines]
    width = min(indents)
    return [line[width:] for line in lines]


def tokenize(source: str, filename: str = "<string>") -> List[Token]:
    """Tokenize source text, discarding comments."""
    return Lexer(source, filename).tokenize()
