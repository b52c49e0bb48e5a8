"""
Tokenizer for calculator input lines.

A single left-to-right scan turns the text into typed tokens. Numbers are kept verbatim as text (the parser
converts them), words are classified as functions, commands or variables, and every sequence ends with exactly
one END token.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List

from exprcalc.errors import LexError

logger = logging.getLogger(__name__)


class TokenType:
    """Enumeration of token types."""
    NUMBER = 'NUMBER'
    VARIABLE = 'VARIABLE'
    FUNCTION = 'FUNCTION'
    PLUS = 'PLUS'
    MINUS = 'MINUS'
    MULTIPLY = 'MULTIPLY'
    DIVIDE = 'DIVIDE'
    POWER = 'POWER'
    LEFTPAREN = 'LEFTPAREN'
    RIGHTPAREN = 'RIGHTPAREN'
    ASSIGN = 'ASSIGN'
    COMMA = 'COMMA'
    ABS = 'ABS'
    FACTORIAL = 'FACTORIAL'
    PRESERVE = 'PRESERVE'
    REMOVE = 'REMOVE'
    END = 'END'


@dataclass(frozen=True)
class Token:
    """Represents a token with type, source text, and character position."""
    type: str
    text: str
    pos: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.text!r}, pos={self.pos})"


# Reserved function names. 'logten' is an older spelling of 'log10'.
FUNCTION_NAMES = frozenset({
    'sin', 'cos', 'tan', 'asin', 'acos', 'atan',
    'exp', 'ln', 'log', 'log10', 'logten', 'sqrt',
    'abs', 'pow', 'fact',
})

_COMMANDS = {
    'preserve': TokenType.PRESERVE,
    'remove': TokenType.REMOVE,
}

_SINGLE_CHARS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.MULTIPLY,
    '/': TokenType.DIVIDE,
    '^': TokenType.POWER,
    '(': TokenType.LEFTPAREN,
    ')': TokenType.RIGHTPAREN,
    '=': TokenType.ASSIGN,
    ',': TokenType.COMMA,
    '|': TokenType.ABS,
    '!': TokenType.FACTORIAL,
}

token_specification = [
    ('NUMBER',   r'[0-9.]+'),               # digits and dots, validated by the parser
    ('WORD',     r'[A-Za-z][A-Za-z0-9_]*'),  # variable, function or command
    ('OP',       r'[-+*/^()=,|!]'),
    ('SKIP',     r'\s+'),
    ('MISMATCH', r'.'),
]
tok_regex = '|'.join(f'(?P<{name}>{pattern})' for name, pattern in token_specification)
get_token = re.compile(tok_regex, re.DOTALL).match


def _classify_word(word: str) -> str:
    if word in FUNCTION_NAMES:
        return TokenType.FUNCTION
    return _COMMANDS.get(word, TokenType.VARIABLE)


def tokenize(text: str) -> List[Token]:
    """
    Converts an input string into a list of tokens terminated by a single END token.

    Raises:
        LexError: If a character is not part of the accepted grammar.
    """
    tokens: List[Token] = []
    pos = 0
    mo = get_token(text, pos)
    while mo is not None:
        kind = mo.lastgroup
        value = mo.group()
        if kind == 'NUMBER':
            tokens.append(Token(TokenType.NUMBER, value, pos))
        elif kind == 'WORD':
            tokens.append(Token(_classify_word(value), value, pos))
        elif kind == 'OP':
            tokens.append(Token(_SINGLE_CHARS[value], value, pos))
        elif kind == 'MISMATCH':
            raise LexError(value, pos)
        pos = mo.end()
        mo = get_token(text, pos)
    tokens.append(Token(TokenType.END, '', pos))
    logger.debug(f"Tokenized {text!r} into {len(tokens)} tokens")
    return tokens


def format_tokens(tokens: List[Token]) -> str:
    """Debug rendering of a token sequence, e.g. '[x] [=] [2] [END]'."""
    return ' '.join(f"[{tok.text or tok.type}]" for tok in tokens)
