# --------------------------
# Exceptions
# --------------------------
#
# Every failure that aborts a single input line derives from CalculatorError so the shell can report it
# and keep the session alive.


class CalculatorError(Exception):
    """Base class for calculator errors."""
    pass


class LexError(CalculatorError):
    """Raised when the tokenizer meets a character it does not recognize."""

    def __init__(self, char: str, pos: int):
        self.char = char
        self.pos = pos
        super().__init__(f"{char} is not recognized as a variable, function, or operation (at position {pos})")


class ParseError(CalculatorError):
    """Raised for malformed grammar: missing delimiters, bad arity, unknown functions, bad commands."""
    pass


class EvalError(CalculatorError):
    """Raised for errors during evaluation, e.g., undefined variables and domain errors."""
    pass
