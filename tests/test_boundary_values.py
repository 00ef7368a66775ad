"""Tests for boundary value catalogs."""

import textwrap

import pytest

from pytest_planner_mcp.core.analyzer.models import ParameterInfo
from pytest_planner_mcp.core.analyzer.type_classifier import classify, classify_parameter
from pytest_planner_mcp.core.generators.extractors.boundary_values import (
    analyze_boundaries,
    generate_boundary_analysis,
    generate_boundary_values,
    get_default_value,
)
from pytest_planner_mcp.core.generators.extractors.constraints import ParameterConstraints
from pytest_planner_mcp.core.pipeline import load_class

NUMERIC_FLOOR = {"0", "1", "-1", "sys.maxsize", "-sys.maxsize - 1"}


def _method(signature: str, body: str = "pass"):
    code = f"class Sample:\n    def method(self, {signature}):\n" + textwrap.indent(
        textwrap.dedent(body).strip() + "\n", "        "
    )
    return load_class(code).get_method("method")


def _values(boundaries):
    return [b.value for b in boundaries]


# =============================================================================
# Numeric
# =============================================================================

class TestNumericBoundaries:
    """Numeric catalogs always include zero, one, minus one and the integer extremes."""

    @pytest.mark.parametrize("constraints", [
        ParameterConstraints(),
        ParameterConstraints(min_value=10),
        ParameterConstraints(min_value=5, max_value=7),
        ParameterConstraints(max_value=-3),
    ])
    def test_fixed_values_always_present(self, constraints):
        boundaries = generate_boundary_values(classify("int"), constraints, "n")

        assert NUMERIC_FLOOR <= set(_values(boundaries))

    def test_constraints_add_values(self):
        boundaries = generate_boundary_values(
            classify("int"), ParameterConstraints(min_value=1, max_value=100), "amount"
        )
        by_category = {}
        for b in boundaries:
            by_category.setdefault(b.category, []).append(b.value)

        assert by_category["just-below-min"] == ["0"]
        assert by_category["just-above-max"] == ["101"]
        assert "1" in by_category["minimum"]
        assert "100" in by_category["maximum"]

    def test_special_floats_are_critical(self):
        analysis = analyze_boundaries(
            ParameterInfo("rate", "float"), classify("float"), ParameterConstraints()
        )

        critical = _values(analysis.critical_values)

        assert "float('nan')" in critical
        assert "float('inf')" in critical
        assert "Validate numeric ranges to prevent overflow" in analysis.recommendations


# =============================================================================
# Other types
# =============================================================================

class TestOtherBoundaries:
    """Tests for string, collection, date, object and boolean catalogs."""

    def test_string_length_bounds(self):
        boundaries = generate_boundary_values(
            classify("str"), ParameterConstraints(min_length=3, max_length=50), "name"
        )
        values = _values(boundaries)

        assert values[:2] == ['""', '"a"']
        assert '"a" * 2' in values
        assert '"a" * 51' in values

    def test_zero_min_length_has_no_value_below(self):
        boundaries = generate_boundary_values(classify("str"), ParameterConstraints(min_length=0), "name")

        assert "just-below-min" not in {b.category for b in boundaries}

    def test_collection(self):
        values = _values(generate_boundary_values(classify("list[int]"), ParameterConstraints(), "items"))

        assert values[:2] == ["[]", "[1]"]
        assert "[1] * 1_000_000" in values

    def test_date(self):
        values = _values(generate_boundary_values(classify("datetime"), ParameterConstraints(), "when"))

        assert values[:2] == ["datetime.min", "datetime.max"]
        assert "{}" not in values

    def test_object(self):
        values = _values(generate_boundary_values(classify("User"), ParameterConstraints(), "user"))

        assert values[:2] == ["{}", '{"key": "value"}']

    def test_boolean(self):
        values = _values(generate_boundary_values(classify("bool"), ParameterConstraints(), "flag"))

        assert values == ["True", "False"]

    def test_nullable_adds_none(self):
        values = _values(generate_boundary_values(classify("Optional[bool]"), ParameterConstraints(), "flag"))

        assert values == ["True", "False", "None"]


# =============================================================================
# Method-level analysis
# =============================================================================

class TestGenerateBoundaryAnalysis:
    """Tests for generate_boundary_analysis()."""

    def test_one_analysis_per_parameter(self):
        method = _method("amount: int, name: str = 'x'", '''
            if amount >= 1 and amount <= 100:
                return name
        ''')

        analyses = generate_boundary_analysis(method)

        assert [a.parameter_name for a in analyses] == ["amount", "name"]
        assert analyses[0].constraints.min_value == 1
        assert analyses[0].constraints.max_value == 100
        assert "None" in _values(analyses[1].boundaries)

    def test_variadics_are_skipped(self):
        analyses = generate_boundary_analysis(_method("value: int, *args, **kwargs"))

        assert [a.parameter_name for a in analyses] == ["value"]

    def test_untyped_parameter_uses_object_catalog(self):
        method = _method("thing")

        analysis = generate_boundary_analysis(method)[0]

        assert analysis.parameter_type == "Any"
        assert analysis.boundaries[0].type == "object"

    def test_to_dict(self):
        param = ParameterInfo("count", "int")
        data = analyze_boundaries(param, classify_parameter(param), ParameterConstraints()).to_dict()

        assert data["parameter_name"] == "count"
        assert data["parameter_type"] == "int"
        assert data["constraints"] == {"allow_null": False}
        assert data["boundaries"][0] == {
            "type": "numeric",
            "category": "zero",
            "value": "0",
            "description": "Zero value for count",
            "risk_level": "medium",
            "expected_behavior": "edge",
        }


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:
    """Tests for default values and test names."""

    @pytest.mark.parametrize("type_hint,name,expected", [
        ("int", None, "1"),
        ("str", None, '"test"'),
        ("Optional[str]", None, '"test"'),
        ("int | None", None, "1"),
        ("list[int]", None, "[1]"),
        (None, "count", "1"),
        (None, "email", '"test"'),
        (None, "config", '{"key": "value"}'),
        (None, "unknown_thing", "None"),
        ("User", None, "None"),
    ])
    def test_get_default_value(self, type_hint, name, expected):
        assert get_default_value(type_hint, name) == expected
