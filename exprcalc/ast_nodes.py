"""
AST node set and the recursive evaluator.

Nodes are plain dataclasses; each one owns its children and nothing points back up the tree, so
copy.deepcopy gives an independent copy for free. Evaluation is a single recursive function that dispatches
on the node class and reads (never writes) the variable mapping it is given.
"""

from __future__ import annotations

import copy
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Mapping

from exprcalc.errors import EvalError

logger = logging.getLogger(__name__)

Environment = Mapping[str, float]


# --------------------------
# AST Nodes
# --------------------------

@dataclass
class ASTNode:
    """Base AST node."""

    def evaluate(self, env: Environment) -> float:
        return evaluate(self, env)

    def clone(self) -> "ASTNode":
        return clone(self)


@dataclass
class Number(ASTNode):
    value: float


@dataclass
class Variable(ASTNode):
    name: str


@dataclass
class UnaryNode(ASTNode):
    operand: ASTNode


class Negate(UnaryNode):
    pass


class Plus(UnaryNode):
    """Unary '+', evaluates to its operand unchanged."""
    pass


class Abs(UnaryNode):
    pass


class Factorial(UnaryNode):
    pass


class Sin(UnaryNode):
    pass


class Cos(UnaryNode):
    pass


class Tan(UnaryNode):
    pass


class ArcSin(UnaryNode):
    pass


class ArcCos(UnaryNode):
    pass


class ArcTan(UnaryNode):
    pass


class Exp(UnaryNode):
    pass


class Ln(UnaryNode):
    pass


class Log10(UnaryNode):
    pass


class Sqrt(UnaryNode):
    pass


@dataclass
class BinaryNode(ASTNode):
    left: ASTNode
    right: ASTNode


class Add(BinaryNode):
    pass


class Subtract(BinaryNode):
    pass


class Multiply(BinaryNode):
    pass


class Divide(BinaryNode):
    pass


class Power(BinaryNode):
    pass


@dataclass
class Log(ASTNode):
    """Logarithm of value in an arbitrary base: log(value, base)."""
    value: ASTNode
    base: ASTNode


# --------------------------
# Numeric helpers
# --------------------------

# Functions evaluated without domain checks. A domain failure gives NaN and an overflow gives infinity,
# as the C math library would.
_TRANSCENDENTALS: Dict[type, Callable[[float], float]] = {
    Sin: math.sin,
    Cos: math.cos,
    Tan: math.tan,
    ArcSin: math.asin,
    ArcCos: math.acos,
    ArcTan: math.atan,
    Exp: math.exp,
}


def _unguarded(func: Callable[[float], float], x: float) -> float:
    try:
        return func(x)
    except ValueError:
        return math.nan
    except OverflowError:
        return math.inf


def _is_integer(x: float) -> bool:
    # infinities are integral; math.floor rejects them
    return math.isinf(x) or (not math.isnan(x) and x == math.floor(x))


def _is_odd(x: float) -> bool:
    return math.isfinite(x) and math.fmod(x, 2) != 0


def factorial(x: float) -> float:
    """
    Iterative factorial of the operand truncated to an integer.

    Negative operands are rejected; non-integer operands are truncated toward zero rather than rejected.
    """
    if x < 0:
        raise EvalError("factorial of negative value")
    if math.isnan(x):
        raise EvalError("factorial of non-numeric value")
    if math.isinf(x):
        return math.inf
    result = 1.0
    for k in range(2, int(x) + 1):
        result *= k
        if math.isinf(result):
            break
    return result


def power(base: float, exponent: float) -> float:
    if base < 0 and not _is_integer(exponent):
        raise EvalError("negative base with non-integer exponent")
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and _is_odd(exponent):
            return -math.inf
        return math.inf
    except ValueError:
        # zero to a negative power is a pole
        if _is_odd(exponent):
            return math.copysign(math.inf, base)
        return math.inf


def log(value: float, base: float) -> float:
    if base == 1:
        raise EvalError("logarithm base of 1")
    if base <= 0 or value <= 0:
        raise EvalError("logarithm of non-positive value")
    return math.log(value) / math.log(base)


# --------------------------
# Evaluator
# --------------------------

def evaluate(node: ASTNode, env: Environment) -> float:
    """Evaluate given AST node against a variable mapping and return the result or raise EvalError."""
    if isinstance(node, Number):
        return node.value
    if isinstance(node, Variable):
        if node.name not in env:
            raise EvalError(f"undefined variable: {node.name}")
        return env[node.name]
    if isinstance(node, UnaryNode):
        x = evaluate(node.operand, env)
        if isinstance(node, Negate):
            return -x
        if isinstance(node, Plus):
            return x
        if isinstance(node, Abs):
            return abs(x)
        if isinstance(node, Factorial):
            return factorial(x)
        if isinstance(node, (Ln, Log10)):
            if x <= 0:
                raise EvalError("logarithm of non-positive value")
            return math.log(x) if isinstance(node, Ln) else math.log10(x)
        if isinstance(node, Sqrt):
            if x < 0:
                raise EvalError("square root of negative value")
            return math.sqrt(x)
        func = _TRANSCENDENTALS.get(type(node))
        if func is not None:
            return _unguarded(func, x)
        raise EvalError(f"Unknown unary node: {type(node).__name__}")
    if isinstance(node, BinaryNode):
        left = evaluate(node.left, env)
        right = evaluate(node.right, env)
        if isinstance(node, Add):
            return left + right
        if isinstance(node, Subtract):
            return left - right
        if isinstance(node, Multiply):
            return left * right
        if isinstance(node, Divide):
            if right == 0:
                raise EvalError("division by zero")
            return left / right
        if isinstance(node, Power):
            return power(left, right)
        raise EvalError(f"Unknown binary node: {type(node).__name__}")
    if isinstance(node, Log):
        return log(evaluate(node.value, env), evaluate(node.base, env))
    raise EvalError(f"Unsupported AST node: {type(node).__name__}")


def clone(node: ASTNode) -> ASTNode:
    """Return a fully independent deep copy of the tree rooted at node."""
    return copy.deepcopy(node)
