# --- tests/test_formulas.py ---
import contextlib
import math

import pytest

from vlab_core.constants import EPSILON
from vlab_core.formulas import (
    FormulaCompiler,
    FormulaSyntaxError,
    FormulaScopeError,
    CircularFormulaDependencyError,
)


@pytest.fixture
def compiler():
    return FormulaCompiler({"g": 9.81, "deg": math.pi / 180})


class TestFormulaCompilation:

    def test_simple_expression(self, compiler):
        compute = compiler.compile("s1", ["m", "v"], [("KE", "0.5*m*v*v")])
        assert compute({"m": 10.0, "v": 15.0}) == {"KE": pytest.approx(1125.0)}

    def test_outputs_are_python_floats_in_declaration_order(self, compiler):
        compute = compiler.compile("s1", ["v0", "a", "t"], [("s", "v0*t + 0.5*a*t**2"), ("vf", "v0 + a*t")])
        result = compute({"v0": 10, "a": 2, "t": 5})
        assert list(result) == ["s", "vf"]
        assert all(type(value) is float for value in result.values())
        assert result["s"] == pytest.approx(75.0)
        assert result["vf"] == pytest.approx(20.0)

    def test_output_may_reference_earlier_or_later_output(self, compiler):
        compute = compiler.compile("s1", ["x"], [("double_sq", "2*sq"), ("sq", "x**2")])
        assert compute({"x": 3.0}) == {"double_sq": pytest.approx(18.0), "sq": pytest.approx(9.0)}

    def test_catalog_constant_is_available(self, compiler):
        compute = compiler.compile("s1", ["m"], [("W", "m*g")])
        assert compute({"m": 2.0})["W"] == pytest.approx(19.62)

    def test_variable_shadows_constant(self, compiler):
        compute = compiler.compile("s1", ["m", "g"], [("W", "m*g")])
        assert compute({"m": 2.0, "g": 1.62})["W"] == pytest.approx(3.24)

    def test_output_key_equal_to_variable_key_reads_the_variable(self, compiler):
        compute = compiler.compile("s1", ["stage"], [("stage", "stage"), ("cells", "where(stage >= 5, 2, 1)")])
        assert compute({"stage": 5.0}) == {"stage": 5.0, "cells": 2.0}
        assert compute({"stage": 2.0}) == {"stage": 2.0, "cells": 1.0}

    def test_identifiers_colliding_with_sympy_names(self, compiler):
        compute = compiler.compile("s1", ["E", "I", "S", "beta"], [("out", "E + I + S + beta")])
        assert compute({"E": 1.0, "I": 2.0, "S": 3.0, "beta": 4.0})["out"] == pytest.approx(10.0)

    def test_pi_and_trig_functions(self, compiler):
        compute = compiler.compile("s1", ["theta"], [("s", "sin(theta*deg)"), ("c", "cos(pi)")])
        result = compute({"theta": 30.0})
        assert result["s"] == pytest.approx(0.5)
        assert result["c"] == pytest.approx(-1.0)

    def test_numeric_expression(self, compiler):
        compute = compiler.compile("s1", ["x"], [("k", "42")])
        assert compute({"x": 1.0}) == {"k": 42.0}

    def test_min_max_sign_and_log10(self, compiler):
        compute = compiler.compile("s1", ["x"], [
            ("clamped", "min(max(x, 0), 1e9)"),
            ("direction", "sign(x)"),
            ("decades", "log10(abs(x))"),
        ])
        result = compute({"x": -100.0})
        assert result["clamped"] == 0.0
        assert result["direction"] == -1.0
        assert result["decades"] == pytest.approx(2.0)


class TestNumericalConventions:

    def test_guard_keeps_denominator_away_from_zero(self, compiler):
        compute = compiler.compile("s1", ["a", "b"], [("q", "a/guard(b)")])
        assert compute({"a": 1.0, "b": 0.0})["q"] == pytest.approx(1.0 / EPSILON)
        assert compute({"a": 1.0, "b": 4.0})["q"] == pytest.approx(0.25)

    def test_unguarded_division_by_zero_is_infinite(self, compiler):
        compute = compiler.compile("s1", ["a", "b"], [("q", "a/b")])
        assert compute({"a": 1.0, "b": 0.0})["q"] == math.inf

    def test_invalid_domain_yields_nan(self, compiler):
        compute = compiler.compile("s1", ["x"], [("r", "sqrt(x)"), ("angle", "asin(x)")])
        result = compute({"x": -4.0})
        assert math.isnan(result["r"])
        assert math.isnan(result["angle"])

    def test_repeated_evaluation_is_identical(self, compiler):
        compute = compiler.compile("s1", ["x"], [("y", "exp(x)/3")])
        assert compute({"x": 1.7}) == compute({"x": 1.7})


class TestFormulaErrors:

    def test_caret_is_rejected_with_hint(self, compiler):
        with pytest.raises(FormulaSyntaxError) as excinfo:
            compiler.compile("s1", ["x"], [("y", "x^2")])
        assert "**" in str(excinfo.value)
        assert excinfo.value.output_key == "y"

    def test_unparseable_expression(self, compiler):
        with pytest.raises(FormulaSyntaxError, match="Invalid expression for output 'y'"):
            compiler.compile("s1", ["x"], [("y", "(x + 2")])

    def test_unknown_function(self, compiler):
        with pytest.raises(FormulaSyntaxError, match="not a supported function"):
            compiler.compile("s1", ["x"], [("y", "cosh(x)")])

    def test_attribute_access_is_unsupported(self, compiler):
        with pytest.raises(FormulaSyntaxError, match="Unsupported construct"):
            compiler.compile("s1", ["x"], [("y", "x.real")])

    def test_string_literal_is_rejected(self, compiler):
        with pytest.raises(FormulaSyntaxError, match="numeric literals"):
            compiler.compile("s1", ["x"], [("y", "'abc'")])

    def test_unresolved_identifier(self, compiler):
        with pytest.raises(FormulaScopeError) as excinfo:
            compiler.compile("s1", ["m"], [("KE", "0.5*m*velocity**2")])
        error = excinfo.value
        assert error.unresolved_symbol == "velocity"
        report = error.get_diagnostic_report()
        assert "Unresolved Identifier" in report
        assert "s1" in report

    def test_direct_cycle(self, compiler):
        with pytest.raises(CircularFormulaDependencyError) as excinfo:
            compiler.compile("s1", ["x"], [("a", "b + x"), ("b", "a * 2")])
        assert set(excinfo.value.cycle) == {"a", "b"}

    def test_self_reference(self, compiler):
        with pytest.raises(CircularFormulaDependencyError):
            compiler.compile("s1", ["x"], [("a", "a + x")])

    def test_errors_pass_through_context_managers_unchanged(self, compiler):
        @contextlib.contextmanager
        def building():
            yield

        with pytest.raises(FormulaScopeError) as excinfo:
            with building():
                compiler.compile("s1", ["t"], [("vf", "gravity*t")])
        assert excinfo.value.__traceback__ is not None
