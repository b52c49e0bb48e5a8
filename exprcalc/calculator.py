"""
Calculator session: the variable environment plus the per-line pipeline.

The environment keeps two mappings with identical keys, name -> value and name -> cached Variable node, and a
set of preserved names that survive clear(). execute() runs tokenize -> parse -> evaluate for one line and only
touches the environment after evaluation succeeded.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from exprcalc.ast_nodes import ASTNode, Variable
from exprcalc.errors import EvalError
from exprcalc.lexer import tokenize
from exprcalc.parser import Parser

logger = logging.getLogger(__name__)

# Constants assigned (and preserved) in every new session.
CONSTANTS: Dict[str, float] = {
    'pi': math.pi,
    'e': math.e,
    'deg2rad': math.pi / 180,
    'rad2deg': 180 / math.pi,
}


@dataclass
class Result:
    """Outcome of one executed line: 'value', 'assignment', 'preserve' or 'remove'."""
    kind: str
    value: Optional[float] = None
    name: Optional[str] = None


class Calculator:
    """Owns the variable environment of one interactive session."""

    def __init__(self, precision: int = 12):
        self.precision = precision
        self.values: Dict[str, float] = {}
        self.variable_nodes: Dict[str, ASTNode] = {}
        self.preserved: Set[str] = set()
        for name, value in CONSTANTS.items():
            self.assign(name, value)
            self.add_preserved_value(name)

    # ---- environment operations ----

    def evaluate(self, expression: ASTNode) -> float:
        """Evaluate an AST against the current values; raises whatever EvalError the tree raises."""
        result = expression.evaluate(self.values)
        logger.debug(f"Evaluated {expression!r} -> {result!r}")
        return result

    def assign(self, name: str, value: float) -> None:
        self.values[name] = value
        self.variable_nodes[name] = Variable(name)
        logger.info(f"Assigned {name} = {value!r}")

    def get_variable(self, name: str) -> ASTNode:
        """Return an independent copy of the cached reference node for name."""
        node = self.variable_nodes.get(name)
        if node is None:
            raise EvalError(f"variable not found: {name}")
        return node.clone()

    def set_variable(self, name: str, value: float) -> None:
        """Rebind the value of name. Unknown names get a reference node too, keeping both mappings in step."""
        if name not in self.variable_nodes:
            self.variable_nodes[name] = Variable(name)
        self.values[name] = value

    def variables(self) -> Dict[str, float]:
        return dict(self.values)

    def clear(self) -> None:
        """Remove every variable that is not preserved."""
        kept = {name: self.values[name] for name in self.preserved if name in self.values}
        self.values.clear()
        self.variable_nodes.clear()
        for name, value in kept.items():
            self.assign(name, value)
        logger.info(f"Cleared variables, kept {sorted(kept)}")

    def add_preserved_value(self, name: str) -> None:
        if name not in self.values:
            raise EvalError(f"variable not found: {name}")
        self.preserved.add(name)
        logger.info(f"Preserved {name}")

    def remove_preserved_value(self, name: str) -> None:
        self.preserved.discard(name)
        logger.info(f"Removed {name} from preserved values")

    # ---- formatting ----

    def format_number(self, value: float) -> str:
        """Compact display form: integral values without '.0', others to the configured precision."""
        if math.isnan(value):
            return "nan"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        if value == math.floor(value) and abs(value) < 1e15:
            return str(int(value))
        return f"{value:.{self.precision}g}"

    def format_vars(self) -> List[str]:
        """Sorted 'name = value' lines; preserved names are marked with '*'."""
        lines = []
        for name in sorted(self.values):
            marker = " *" if name in self.preserved else ""
            lines.append(f"{name} = {self.format_number(self.values[name])}{marker}")
        return lines

    # ---- per-line pipeline ----

    def execute(self, line: str) -> Result:
        """
        Tokenize, parse and evaluate one input line.

        Returns:
            Result describing what the line did.

        Raises:
            LexError, ParseError, EvalError: The line is abandoned and the environment is left unchanged.
        """
        parser = Parser(tokenize(line))

        if parser.parse_preserve():
            name = parser.get_command_var()
            self.add_preserved_value(name)
            return Result('preserve', name=name)
        if parser.parse_remove():
            name = parser.get_command_var()
            self.remove_preserved_value(name)
            return Result('remove', name=name)

        expression = parser.parse()
        value = self.evaluate(expression)
        if parser.is_assignment():
            name = parser.get_assign_var()
            self.assign(name, value)
            return Result('assignment', value=value, name=name)
        return Result('value', value=value)
