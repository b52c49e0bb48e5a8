import math

import pytest

from exprcalc.ast_nodes import Variable
from exprcalc.calculator import CONSTANTS, Calculator, Result
from exprcalc.errors import EvalError, LexError, ParseError


def run(calc, line):
    return calc.execute(line).value


def test_new_session_has_preserved_constants(calc):
    assert set(calc.values) == set(CONSTANTS)
    assert calc.preserved == set(CONSTANTS)
    assert set(calc.variable_nodes) == set(calc.values)
    assert calc.values['pi'] == math.pi
    assert math.isclose(calc.values['deg2rad'] * calc.values['rad2deg'], 1.0)


@pytest.mark.parametrize("line,expected", [
    ("2 + 3 * 4", 14),
    ("2 ^ 3 ^ 2", 512),
    ("2 * 3 + 4", 10),
    ("(2 + 3) * 4", 20),
    ("--5", 5),
    ("-3!", -6),
    ("3!!", 720),
    ("|2 - 5|", 3),
    ("log(8, 2)", 3),
    ("pow(2, 8)", 256),
    ("sqrt(16) + abs(-2)", 6),
    ("sin(pi / 2)", 1),
    ("cos(180 * deg2rad)", -1),
    ("ln(e)", 1),
    ("log10(1000)", 3),
    ("fact(5)", 120),
    ("10 / 4", 2.5),
])
def test_execute_expressions(calc, line, expected):
    result = calc.execute(line)
    assert result.kind == 'value'
    assert math.isclose(result.value, expected)


def test_assignment_then_use(calc):
    result = calc.execute("x = 5")
    assert result == Result('assignment', value=5.0, name='x')
    assert run(calc, "x * 2") == 10.0


def test_assignment_can_reference_itself(calc):
    calc.execute("n = 2")
    calc.execute("n = n ^ 3")
    assert calc.values['n'] == 8.0


def test_execute_is_deterministic(calc):
    line = "sin(pi / 3) * 2 ^ 0.5 + log(10, 3)"
    assert run(calc, line) == run(Calculator(), line)


@pytest.mark.parametrize("line,error,message", [
    ("1 / 0", EvalError, "division by zero"),
    ("sqrt(-1)", EvalError, "negative value"),
    ("log(5,1)", EvalError, "base of 1"),
    ("(3 + 4", ParseError, ")"),
    ("y + 1", EvalError, "undefined variable: y"),
    ("1 # 2", LexError, "#"),
])
def test_execute_errors(calc, line, error, message):
    with pytest.raises(error) as e:
        calc.execute(line)
    assert message in str(e.value)


def test_failed_assignment_leaves_environment_unchanged(calc):
    calc.execute("x = 1")
    before = calc.variables()
    with pytest.raises(EvalError):
        calc.execute("x = 1 / 0")
    with pytest.raises(EvalError):
        calc.execute("z = undefined_name")
    assert calc.variables() == before
    assert 'z' not in calc.variable_nodes


def test_get_variable_returns_independent_copy(calc):
    calc.assign('x', 4.0)
    node = calc.get_variable('x')
    assert node == Variable('x')
    assert node is not calc.variable_nodes['x']
    assert calc.evaluate(node) == 4.0


def test_get_variable_unknown_name(calc):
    with pytest.raises(EvalError) as e:
        calc.get_variable('missing')
    assert "variable not found" in str(e.value)


def test_set_variable_rebinds_value(calc):
    calc.assign('x', 1.0)
    cached = calc.variable_nodes['x']
    calc.set_variable('x', 2.0)
    assert calc.values['x'] == 2.0
    assert calc.variable_nodes['x'] is cached


def test_set_variable_on_unknown_name_keeps_maps_consistent(calc):
    calc.set_variable('fresh', 9.0)
    assert calc.values['fresh'] == 9.0
    assert set(calc.variable_nodes) == set(calc.values)
    assert calc.evaluate(calc.get_variable('fresh')) == 9.0


def test_preserve_survives_clear(calc):
    calc.assign('x', 1.0)
    calc.assign('y', 2.0)
    calc.add_preserved_value('x')
    calc.clear()
    assert calc.evaluate(Variable('x')) == 1.0
    with pytest.raises(EvalError):
        calc.evaluate(Variable('y'))
    with pytest.raises(EvalError):
        calc.get_variable('y')
    assert set(calc.variable_nodes) == set(calc.values)


def test_clear_keeps_constants(calc):
    calc.execute("a = 3")
    calc.clear()
    assert set(calc.values) == set(CONSTANTS)


def test_clear_is_idempotent(calc):
    calc.assign('x', 1.0)
    calc.assign('y', 2.0)
    calc.add_preserved_value('y')
    calc.clear()
    once = calc.variables()
    calc.clear()
    assert calc.variables() == once


def test_add_preserved_value_requires_existing_variable(calc):
    with pytest.raises(EvalError):
        calc.add_preserved_value('ghost')
    assert 'ghost' not in calc.preserved


def test_remove_preserved_value(calc):
    calc.assign('x', 1.0)
    calc.add_preserved_value('x')
    calc.remove_preserved_value('x')
    calc.remove_preserved_value('never_there')
    calc.clear()
    assert 'x' not in calc.values


def test_constants_can_be_unpreserved(calc):
    calc.remove_preserved_value('pi')
    calc.clear()
    with pytest.raises(EvalError):
        calc.execute("pi * 2")


def test_execute_preserve_and_remove_commands(calc):
    calc.execute("k = 7")
    assert calc.execute("preserve k") == Result('preserve', name='k')
    calc.clear()
    assert calc.values['k'] == 7.0
    assert calc.execute("remove k") == Result('remove', name='k')
    calc.clear()
    assert 'k' not in calc.values


def test_execute_preserve_unknown_variable(calc):
    with pytest.raises(EvalError):
        calc.execute("preserve nothing")


def test_execute_malformed_preserve(calc):
    with pytest.raises(ParseError):
        calc.execute("preserve x + 1")


@pytest.mark.parametrize("value,expected", [
    (14.0, "14"),
    (-3.0, "-3"),
    (2.5, "2.5"),
    (1 / 3, "0.333333333333"),
    (1e20, "1e+20"),
    (math.inf, "inf"),
    (-math.inf, "-inf"),
    (math.nan, "nan"),
])
def test_format_number(calc, value, expected):
    assert calc.format_number(value) == expected


def test_format_number_respects_precision():
    assert Calculator(precision=3).format_number(math.pi) == "3.14"


def test_format_vars_marks_preserved(calc):
    calc.assign('x', 2.0)
    lines = calc.format_vars()
    assert "x = 2" in lines
    assert "e = 2.71828182846 *" in lines
    assert lines == sorted(lines)


@pytest.mark.parametrize("line", ["0 ^ -1", "(-2) ^ exp(1000)"])
def test_power_poles_and_infinite_exponents(calc, line):
    assert run(calc, line) == math.inf
