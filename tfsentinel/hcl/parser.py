"""
Parser - turns a directory of Terraform files into a tree of Blocks
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..errors import InputError, ParseError
from ..ignores import IgnoreIndex
from ..models import Range
from .blocks import Attribute, Block
from .lexer import CLOSERS, OPENERS, Comment, Lexer, Token, TokenType
from .values import resolve

logger = logging.getLogger(__name__)


class _FileParser:
    """Recursive descent over the tokens of a single file"""

    def __init__(self, tokens: List[Token], filename: str):
        self.tokens = tokens
        self.filename = filename
        self.pos = 0
        self.blocks: List[Block] = []

    def parse(self) -> List[Block]:
        self._parse_body(None)
        return self.blocks

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _next(self) -> Token:
        token = self.tokens[self.pos]
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    def _error(self, message: str, token: Token) -> ParseError:
        return ParseError(message, self.filename, token.line, token.column)

    def _parse_body(self, parent: Optional[Block]) -> Token:
        """Parse attributes and blocks until the closing brace (or EOF at top level)."""
        while True:
            token = self._next()

            if token.type is TokenType.NEWLINE:
                continue

            if token.type is TokenType.EOF:
                if parent is not None:
                    raise self._error(
                        f"Unclosed block '{parent.full_name}' opened on line {parent.range.start_line}",
                        token,
                    )
                return token

            if token.type is TokenType.RBRACE:
                if parent is None:
                    raise self._error("Unexpected '}'", token)
                return token

            if token.type is not TokenType.IDENT:
                raise self._error(f"Expected an attribute or block, found {token.describe()}", token)

            following = self._peek()
            if following.type is TokenType.EQUALS:
                self._next()
                self._parse_attribute(token, parent)
            elif following.type in (TokenType.IDENT, TokenType.STRING, TokenType.LBRACE):
                block = self._parse_block(token, parent)
                if parent is None:
                    self.blocks.append(block)
                else:
                    parent._add_child(block)
            else:
                raise self._error(
                    f"Expected '=' or a block after '{token.value}', found {following.describe()}",
                    following,
                )

    def _parse_block(self, keyword: Token, parent: Optional[Block]) -> Block:
        labels: List[str] = []
        while self._peek().type in (TokenType.IDENT, TokenType.STRING):
            label = self._next()
            if label.templated:
                raise self._error("Template sequences are not allowed in block labels", label)
            labels.append(label.value)

        brace = self._next()
        if brace.type is not TokenType.LBRACE:
            raise self._error(f"Expected '{{' to open block '{keyword.value}', found {brace.describe()}", brace)

        block = Block(keyword.value, labels, Range(self.filename, keyword.line, keyword.line), parent=parent)
        closing = self._parse_body(block)
        block._close(closing.line)
        return block

    def _parse_attribute(self, name: Token, parent: Optional[Block]) -> None:
        tokens = self._collect_expression()
        if not tokens:
            raise self._error(f"Expected a value for attribute '{name.value}'", self._peek())

        end_line = max(token.end_line for token in tokens)
        attribute = Attribute(name.value, resolve(tokens), Range(self.filename, name.line, end_line))

        if parent is None:
            logger.warning(f"{self.filename}:{name.line}: ignoring top level attribute '{name.value}'")
            return

        previous = parent.get_attribute(name.value)
        if previous is not None:
            raise self._error(
                f"Attribute '{name.value}' redefined (first defined on line {previous.range.start_line})",
                name,
            )
        parent._add_attribute(attribute)

    def _collect_expression(self) -> List[Token]:
        """
        Take tokens up to the end of the expression.

        The expression ends at a newline or a closing brace that is not
        nested inside brackets; newlines inside brackets are kept.
        """
        tokens: List[Token] = []
        stack: List[Token] = []

        while True:
            token = self._peek()

            if token.type is TokenType.EOF:
                if stack:
                    raise self._error(f"Unclosed {stack[-1].type.value}", stack[-1])
                return tokens
            if not stack and token.type in (TokenType.NEWLINE, TokenType.RBRACE):
                return tokens

            if token.type in OPENERS:
                stack.append(token)
            elif token.type in CLOSERS:
                if not stack or stack[-1].type is not CLOSERS[token.type]:
                    raise self._error(f"Unexpected {token.type.value}", token)
                stack.pop()

            tokens.append(self._next())


class Parser:
    """Parses Terraform configuration files into Blocks"""

    FILE_EXTENSIONS = {'.tf'}

    # Directories that never hold configuration to scan
    SKIP_DIRS = {
        '.terraform', '.git', '.svn', '.hg', 'node_modules',
        '__pycache__', '.idea', '.vscode',
    }

    def __init__(self, max_workers: int = 1):
        self.max_workers = max_workers
        self.ignores = IgnoreIndex()
        self.files_parsed: List[str] = []

    def parse_directory(self, path: Union[str, Path]) -> List[Block]:
        """
        Parse every eligible file below a directory.

        Files are parsed in lexicographic path order and their top-level
        blocks concatenated in that order.

        Raises:
            InputError: the directory or one of its files cannot be read.
            ParseError: a file is not valid HCL.
        """
        directory = Path(path)
        if not directory.exists():
            raise InputError("Directory does not exist", str(directory))
        if not directory.is_dir():
            raise InputError("Not a directory", str(directory))

        files = self._collect_files(directory)
        logger.info(f"Parsing {len(files)} files in {directory}")

        if self.max_workers > 1 and len(files) > 10:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                parsed = list(executor.map(self._parse_path, files))
        else:
            parsed = [self._parse_path(f) for f in files]

        blocks: List[Block] = []
        for file_path, (file_blocks, comments) in zip(files, parsed):
            self._record(str(file_path), comments)
            blocks.extend(file_blocks)

        logger.info(f"Parsed {len(blocks)} top level blocks from {len(files)} files")
        return blocks

    def parse_file(self, path: Union[str, Path]) -> List[Block]:
        """Parse a single file."""
        file_path = Path(path)
        blocks, comments = self._parse_path(file_path)
        self._record(str(file_path), comments)
        return blocks

    def parse_source(self, source: str, filename: str = "main.tf") -> List[Block]:
        """Parse configuration held in memory, reporting ranges against filename."""
        blocks, comments = self._parse_text(source, filename)
        self._record(filename, comments)
        return blocks

    def _record(self, filename: str, comments: List[Comment]) -> None:
        self.files_parsed.append(filename)
        self.ignores.add_comments(filename, comments)

    def _collect_files(self, directory: Path) -> List[Path]:
        files = []
        for root, dirs, filenames in os.walk(directory):
            dirs[:] = [d for d in dirs if d not in self.SKIP_DIRS]
            root_path = Path(root)
            for filename in filenames:
                if Path(filename).suffix.lower() in self.FILE_EXTENSIONS:
                    files.append(root_path / filename)
        return sorted(files, key=lambda p: p.as_posix())

    def _parse_path(self, path: Path) -> Tuple[List[Block], List[Comment]]:
        logger.debug(f"Parsing {path}")
        return self._parse_text(self._read_file(path), str(path))

    def _parse_text(self, source: str, filename: str) -> Tuple[List[Block], List[Comment]]:
        lexer = Lexer(source, filename)
        tokens = lexer.tokenize()
        blocks = _FileParser(tokens, filename).parse()
        return blocks, lexer.comments

    def _read_file(self, path: Path) -> str:
        """Read file content, falling back to latin-1 for non UTF-8 files"""
        encodings = ['utf-8', 'latin-1']

        for encoding in encodings:
            try:
                with open(path, 'r', encoding=encoding) as f:
                    return f.read()
            except UnicodeDecodeError:
                continue
            except OSError as e:
                raise InputError(f"Unable to read file ({e.strerror or e})", str(path)) from e

        raise InputError("Unable to decode file", str(path))


def parse_directory(path: Union[str, Path], max_workers: int = 1) -> List[Block]:
    """Convenience: parse a directory with a fresh Parser."""
    return Parser(max_workers=max_workers).parse_directory(path)
