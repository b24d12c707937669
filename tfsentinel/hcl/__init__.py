"""
HCL parsing for tfsentinel.

- lexer: source text -> tokens (and comments)
- values: expression tokens -> Value (literal or UNRESOLVED)
- blocks: the Block/Attribute tree
- parser: files and directories -> list of top-level Blocks
"""

from .lexer import Comment, Lexer, Token, TokenType, tokenize
from .values import UNRESOLVED, Value, ValueKind, resolve
from .blocks import Attribute, Block, walk_blocks
from .parser import Parser, parse_directory

__all__ = [
    'Attribute',
    'Block',
    'Comment',
    'Lexer',
    'Parser',
    'Token',
    'TokenType',
    'UNRESOLVED',
    'Value',
    'ValueKind',
    'parse_directory',
    'resolve',
    'tokenize',
    'walk_blocks',
]
