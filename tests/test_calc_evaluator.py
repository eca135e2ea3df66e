"""Tests for sheetcalc.calc formula evaluation."""

from __future__ import annotations

import pytest

from sheetcalc._errors import ArgumentNullError, UndefinedVariableError
from sheetcalc.calc._parser import Formula
from sheetcalc.calc._protocol import FormulaError


def _no_variables(name: str) -> float:
    raise UndefinedVariableError(name)


def _values(**kwargs: float):
    return kwargs.__getitem__


class TestArithmetic:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("2+3*4", 14.0),
            ("(2+3)*4", 20.0),
            ("2*3+4", 10.0),
            ("10-4-3", 3.0),
            ("100/10/5", 2.0),
            ("2-3+4", 3.0),
            ("8/(2*2)", 2.0),
            ("2*(3+4)*5", 70.0),
            ("1-(2-3)+4", 6.0),
            ("((7))", 7.0),
            ("(1+2)*(3+4)", 21.0),
            ("2+3*4-1", 13.0),
            ("6/3*2", 4.0),
            ("1.5e2/3", 50.0),
            (".5+.25", 0.75),
            ("(((1+2)*3)-4)/5", 1.0),
            ("1+2+3+4+5", 15.0),
            ("2*3*4/6", 4.0),
        ],
    )
    def test_constant(self, text: str, expected: float) -> None:
        assert Formula(text).evaluate(_no_variables) == pytest.approx(expected)

    def test_result_is_float(self) -> None:
        result = Formula("1+1").evaluate(_no_variables)
        assert isinstance(result, float)


class TestVariables:
    def test_lookup(self) -> None:
        f = Formula("x + y * 2")
        assert f.evaluate(_values(x=1.0, y=3.0)) == 7.0

    def test_lookup_after_normalization(self) -> None:
        f = Formula("a1 * b1", normalize=str.upper)
        assert f.evaluate(_values(A1=2.0, B1=4.5)) == 9.0

    def test_repeated_variable(self) -> None:
        assert Formula("x*x-x").evaluate(_values(x=3.0)) == 6.0

    def test_undefined_variable(self) -> None:
        result = Formula("A1+1").evaluate(_no_variables)
        assert isinstance(result, FormulaError)
        assert "undefined variable" in result.reason
        assert "A1" in result.reason

    def test_plain_key_error_counts_as_undefined(self) -> None:
        result = Formula("x+q").evaluate({"x": 1.0}.__getitem__)
        assert result == FormulaError("undefined variable: q")

    def test_non_numeric_value(self) -> None:
        result = Formula("x+1").evaluate({"x": "text"}.__getitem__)
        assert result == FormulaError("not a number: x")

    def test_other_lookup_errors_propagate(self) -> None:
        def broken(name: str) -> float:
            raise RuntimeError(name)

        with pytest.raises(RuntimeError, match="x"):
            Formula("x").evaluate(broken)

    def test_lookup_is_required(self) -> None:
        with pytest.raises(ArgumentNullError):
            Formula("1").evaluate(None)  # type: ignore[arg-type]


class TestDivisionByZero:
    @pytest.mark.parametrize("text", ["10/0", "1/(2-2)", "5/x", "(1+2)/(0*3)", "1/0+2"])
    def test_returns_error(self, text: str) -> None:
        result = Formula(text).evaluate(_values(x=0.0))
        assert result == FormulaError("division by zero")

    def test_error_is_not_raised(self) -> None:
        # Returned as a value so callers can store it in a cell.
        result = Formula("1/0").evaluate(_no_variables)
        assert str(result) == "#ERROR: division by zero"


class TestRoundTrip:
    @pytest.mark.parametrize("text", ["x1 + 3 * (y - 2.5e1) / z", "((a)) - b*b", "7"])
    def test_reparsed_formula_evaluates_identically(self, text: str) -> None:
        lookup = _values(x1=4.0, y=30.0, z=2.0, a=1.0, b=3.0)
        f = Formula(text)
        g = Formula(str(f))
        assert g.evaluate(lookup) == f.evaluate(lookup)
