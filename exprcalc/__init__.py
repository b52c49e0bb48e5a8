"""Interactive arithmetic expression calculator: tokenizer, recursive descent parser and AST evaluator."""

from exprcalc.errors import CalculatorError, LexError, ParseError, EvalError
from exprcalc.lexer import Token, TokenType, tokenize, format_tokens
from exprcalc.parser import Parser
from exprcalc.calculator import Calculator, Result

__all__ = [
    'CalculatorError', 'LexError', 'ParseError', 'EvalError',
    'Token', 'TokenType', 'tokenize', 'format_tokens',
    'Parser', 'Calculator', 'Result',
]
