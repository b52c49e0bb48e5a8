"""
Interactive shell around the Calculator: prompt, history, completion and the help/vars/clear/exit commands.

process_line() is the testable unit; repl_loop() only does terminal I/O around it.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory

from exprcalc.calculator import Calculator
from exprcalc.config import Settings
from exprcalc.errors import CalculatorError
from exprcalc.lexer import FUNCTION_NAMES, format_tokens, tokenize

logger = logging.getLogger(__name__)

COMMANDS = ('help', 'vars', 'clear', 'exit', 'quit', 'preserve', 'remove')

HELP_TEXT = """\
=== Calculator Help ===

BASIC OPERATIONS:
  +, -, *, /          Basic arithmetic
  ^                   Exponentiation, right-assoc (2^3^2 = 512)
  !                   Factorial, postfix (5! = 120)
  ( )                 Parentheses for grouping
  | |                 Absolute value

VARIABLES:
  x = 5               Assign value to variable
  y = x * 2 + 3       Use variables in expressions
  preserve x          Keep x when variables are cleared
  remove x            Stop preserving x

FUNCTIONS:
  sin(x), cos(x), tan(x)     Trigonometric functions (radians)
  asin(x), acos(x), atan(x)  Inverse trig functions
  exp(x)              e^x
  ln(x)               Natural logarithm
  log10(x)            Base-10 logarithm
  log(x,y)            Logarithm base y of x
  pow(x,y)            x^y
  sqrt(x)             Square root
  abs(x)              Absolute value
  fact(x)             Factorial

COMMANDS:
  help                Show this help message
  vars                Display all variables (* marks preserved ones)
  clear               Clear all non-preserved variables
  exit, quit          Quit calculator

PREDEFINED VARIABLES:
  pi, e               Mathematical constants
  deg2rad, rad2deg    Angle conversion factors"""


class REPL:
    """Read-Eval-Print Loop for the calculator."""

    def __init__(self, settings: Optional[Settings] = None, calculator: Optional[Calculator] = None):
        self.settings = settings or Settings()
        self.calculator = calculator or Calculator(precision=self.settings.precision)
        self.session: Optional[PromptSession] = None

    def _completer(self) -> WordCompleter:
        words: List[str] = sorted(FUNCTION_NAMES) + list(COMMANDS) + sorted(self.calculator.values)
        return WordCompleter(words)

    def _run_command(self, cmd: str) -> Optional[str]:
        """Execute a bare shell command. Raises EOFError for exit/quit; returns None if cmd is not a command."""
        if cmd in ('exit', 'quit'):
            raise EOFError()
        if cmd == 'help':
            return HELP_TEXT
        if cmd == 'vars':
            return "\n".join(self.calculator.format_vars()) or "(no variables)"
        if cmd == 'clear':
            self.calculator.clear()
            return "Variables cleared."
        return None

    def process_line(self, line: str) -> Tuple[bool, str]:
        """Evaluate a single line (either command or expression). Returns (ok, output)."""
        text = line.strip()
        out = self._run_command(text)
        if out is not None:
            return True, out

        calc = self.calculator
        try:
            prefix = ""
            if self.settings.show_tokens:
                prefix = "Tokens: " + format_tokens(tokenize(text)) + "\n"
            result = calc.execute(text)
        except CalculatorError as e:
            return False, f"Error: {e}"
        except Exception as e:
            logger.exception("Unhandled error while processing line")
            return False, f"Unexpected error: {e}"

        if result.kind == 'preserve':
            return True, prefix + f"{result.name} preserved"
        if result.kind == 'remove':
            return True, prefix + f"{result.name} no longer preserved"
        if result.kind == 'assignment':
            return True, prefix + f"{result.name} = {calc.format_number(result.value)}"
        return True, prefix + f"{text} = {calc.format_number(result.value)}"

    def _read_line(self) -> str:
        if self.session is None:
            self.session = PromptSession(history=FileHistory(self.settings.history_file))
        return self.session.prompt(self.settings.prompt, completer=self._completer())

    def repl_loop(self) -> None:
        """Interactive loop; Ctrl-C discards the current line, Ctrl-D or 'exit' ends the session."""
        print("Calculator. Type 'help' for assistance.")
        while True:
            try:
                line = self._read_line()
            except KeyboardInterrupt:
                print("^C")
                continue
            except EOFError:
                break
            if not line.strip():
                continue
            try:
                _, out = self.process_line(line)
            except EOFError:
                break
            print(out)
        print("Goodbye!")
