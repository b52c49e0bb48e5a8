"""
Recursive descent parser for calculator input lines.

Grammar (lowest to highest binding power):
    line        : VARIABLE '=' addition | addition
    addition    : multiplication (('+'|'-') multiplication)*
    multiplication : power (('*'|'/') power)*
    power       : unary ('^' power)?                  (right-assoc)
    unary       : '-' unary | '+' unary | primary '!'*
    primary     : NUMBER | VARIABLE | '|' addition '|'
                | FUNCTION '(' addition (',' addition)? ')'
                | '(' addition ')'

'preserve NAME' and 'remove NAME' are out-of-band commands handled by parse_preserve()/parse_remove(),
which callers check before parse().
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from exprcalc.ast_nodes import (
    ASTNode, Number, Variable, Negate, Plus, Abs, Factorial,
    Add, Subtract, Multiply, Divide, Power,
    Sin, Cos, Tan, ArcSin, ArcCos, ArcTan, Exp, Ln, Log10, Log, Sqrt,
)
from exprcalc.errors import ParseError
from exprcalc.lexer import Token, TokenType

logger = logging.getLogger(__name__)

# Single-argument functions by name.
UNARY_FUNCTIONS: Dict[str, Callable[[ASTNode], ASTNode]] = {
    'sin': Sin,
    'cos': Cos,
    'tan': Tan,
    'asin': ArcSin,
    'acos': ArcCos,
    'atan': ArcTan,
    'exp': Exp,
    'ln': Ln,
    'log10': Log10,
    'logten': Log10,
    'sqrt': Sqrt,
    'abs': Abs,
    'fact': Factorial,
}

# Two-argument functions by name.
BINARY_FUNCTIONS: Dict[str, Callable[[ASTNode, ASTNode], ASTNode]] = {
    'log': Log,
    'pow': Power,
}


class Parser:
    """Builds one AST per input line from a token sequence ending in END."""

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != TokenType.END:
            tokens = list(tokens) + [Token(TokenType.END, '')]
        self.tokens = tokens
        self.pos = 0
        self.assignment = False
        self.assign_var: Optional[str] = None
        self.command_var: Optional[str] = None

    # ---- cursor operations; the cursor never moves past END ----

    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return self.tokens[self.pos]

    def check_type(self, type_: str) -> bool:
        return self.current().type == type_

    def _expect(self, type_: str, message: str) -> Token:
        tok = self.current()
        if tok.type != type_:
            raise ParseError(message)
        self.advance()
        return tok

    def _contains(self, type_: str) -> bool:
        return any(tok.type == type_ for tok in self.tokens)

    # ---- public entry points ----

    def is_assignment(self) -> bool:
        return self.assignment

    def get_assign_var(self) -> Optional[str]:
        return self.assign_var

    def get_command_var(self) -> Optional[str]:
        """Variable named by the last successful parse_preserve()/parse_remove()."""
        return self.command_var

    def parse_preserve(self) -> bool:
        return self._parse_command(TokenType.PRESERVE, "preserve")

    def parse_remove(self) -> bool:
        return self._parse_command(TokenType.REMOVE, "remove")

    def _parse_command(self, type_: str, keyword: str) -> bool:
        """Accepts exactly 'KEYWORD VARIABLE END'; any other use of the keyword is an error."""
        if not self._contains(type_):
            return False
        types = [tok.type for tok in self.tokens]
        if types != [type_, TokenType.VARIABLE, TokenType.END]:
            raise ParseError(f"use {keyword} [variable]")
        self.command_var = self.tokens[1].text
        logger.debug(f"Parsed {keyword} command for {self.command_var}")
        return True

    def parse(self) -> ASTNode:
        """Parses the whole line and returns the root AST node."""
        node = self.parse_assignment()
        if not self.check_type(TokenType.END):
            tok = self.current()
            raise ParseError(f"unexpected token '{tok.text}' at position {tok.pos}")
        logger.debug(f"Parsed AST: {node!r}")
        return node

    # ---- precedence levels ----

    def parse_assignment(self) -> ASTNode:
        if self._contains(TokenType.ASSIGN):
            if self.tokens[0].type != TokenType.VARIABLE or self.tokens[1].type != TokenType.ASSIGN:
                raise ParseError("use [variable] = [expression] for assignment")
            self.assignment = True
            self.assign_var = self.tokens[0].text
            self.advance()
            self.advance()
        return self.parse_addition()

    def parse_addition(self) -> ASTNode:
        left = self.parse_multiplication()
        while self.check_type(TokenType.PLUS) or self.check_type(TokenType.MINUS):
            op = self.current().type
            self.advance()
            right = self.parse_multiplication()
            left = Add(left, right) if op == TokenType.PLUS else Subtract(left, right)
        return left

    def parse_multiplication(self) -> ASTNode:
        left = self.parse_power()
        while self.check_type(TokenType.MULTIPLY) or self.check_type(TokenType.DIVIDE):
            op = self.current().type
            self.advance()
            right = self.parse_power()
            left = Multiply(left, right) if op == TokenType.MULTIPLY else Divide(left, right)
        return left

    def parse_power(self) -> ASTNode:
        left = self.parse_unary()
        if self.check_type(TokenType.POWER):
            self.advance()
            # Recursing into parse_power makes a^b^c group as a^(b^c).
            return Power(left, self.parse_power())
        return left

    def parse_unary(self) -> ASTNode:
        if self.check_type(TokenType.MINUS):
            self.advance()
            return Negate(self.parse_unary())
        if self.check_type(TokenType.PLUS):
            self.advance()
            return Plus(self.parse_unary())
        node = self.parse_primary()
        while self.check_type(TokenType.FACTORIAL):
            self.advance()
            node = Factorial(node)
        return node

    def parse_primary(self) -> ASTNode:
        tok = self.current()

        if tok.type == TokenType.NUMBER:
            self.advance()
            try:
                return Number(float(tok.text))
            except ValueError:
                raise ParseError(f"invalid number literal: {tok.text}")

        if tok.type == TokenType.VARIABLE:
            self.advance()
            return Variable(tok.text)

        if tok.type == TokenType.ABS:
            self.advance()
            expr = self.parse_addition()
            self._expect(TokenType.ABS, "expected closing | for absolute value expression")
            return Abs(expr)

        if tok.type == TokenType.FUNCTION:
            return self._parse_function(tok.text)

        if tok.type == TokenType.LEFTPAREN:
            self.advance()
            expr = self.parse_addition()
            self._expect(TokenType.RIGHTPAREN, "expected ')' after expression")
            return expr

        raise ParseError("unexpected element in expression")

    def _parse_function(self, name: str) -> ASTNode:
        self.advance()
        self._expect(TokenType.LEFTPAREN, f"expected '(' after function name {name}")

        if name in BINARY_FUNCTIONS:
            first = self.parse_addition()
            self._expect(TokenType.COMMA, f"expected ',' between {name} arguments")
            second = self.parse_addition()
            self._expect(TokenType.RIGHTPAREN, "expected ')' after function arguments")
            return BINARY_FUNCTIONS[name](first, second)

        argument = self.parse_addition()
        self._expect(TokenType.RIGHTPAREN, "expected ')' after function argument")
        if name in UNARY_FUNCTIONS:
            return UNARY_FUNCTIONS[name](argument)
        raise ParseError(f"unknown function: {name}")
