"""
Boundary Values - Graded boundary inputs per parameter type.

Values are Python expressions ("0", '""', "sys.maxsize") that a generated
test can paste into a call. Numeric catalogs always carry 0, 1, -1 and the
interpreter's integer extremes; inferred constraints only add values.
"""

from dataclasses import dataclass, field
from typing import Literal

from ...analyzer.models import MethodInfo, ParameterInfo
from ...analyzer.policy import DEFAULT_POLICY, AnalysisPolicy
from ...analyzer.type_classifier import TypeClassification, classify_parameter
from .constraints import ParameterConstraints, maybe_constraints

BoundaryType = Literal["numeric", "string", "array", "date", "object", "boolean"]
BoundaryCategory = Literal[
    "minimum", "maximum", "just-below-min", "just-above-max",
    "zero", "negative", "positive", "empty", "overflow",
]
RiskLevel = Literal["low", "medium", "high", "critical"]
BoundaryBehavior = Literal["valid", "invalid", "edge", "error"]

INT_MAX = "sys.maxsize"
INT_MIN = "-sys.maxsize - 1"


@dataclass(frozen=True)
class BoundaryValue:
    """A boundary value for testing."""
    type: BoundaryType
    category: BoundaryCategory
    value: str          # Python expression: "0", '""', "[]"
    description: str
    risk_level: RiskLevel
    expected_behavior: BoundaryBehavior

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type,
            "category": self.category,
            "value": self.value,
            "description": self.description,
            "risk_level": self.risk_level,
            "expected_behavior": self.expected_behavior,
        }


@dataclass(frozen=True)
class BoundaryAnalysis:
    parameter_name: str
    parameter_type: str
    boundaries: tuple[BoundaryValue, ...]
    constraints: ParameterConstraints = field(default_factory=ParameterConstraints)
    recommendations: tuple[str, ...] = ()

    @property
    def critical_values(self) -> list[BoundaryValue]:
        return [b for b in self.boundaries if b.risk_level == "critical"]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "parameter_name": self.parameter_name,
            "parameter_type": self.parameter_type,
            "boundaries": [b.to_dict() for b in self.boundaries],
            "constraints": self.constraints.to_dict(),
            "recommendations": list(self.recommendations),
        }


# Default value for each type (for a valid baseline input)
DEFAULT_VALUES = {
    "int": "1",
    "float": "1.0",
    "str": '"test"',
    "bool": "True",
    "list": "[1]",
    "dict": '{"key": "value"}',
    "set": "{1}",
    "tuple": "(1,)",
    "bytes": 'b"data"',
    "date": "date(2024, 1, 1)",
    "datetime": "datetime(2024, 1, 1)",
    "None": "None",
    "Any": "None",
}

# Guess defaults by parameter name patterns
NAME_PATTERNS = {
    # Numeric names → int
    ('a', 'b', 'x', 'y', 'n', 'i', 'j', 'k', 'num', 'number', 'count', 'index', 'size', 'length',
     'amount', 'age', 'limit', 'quantity'): "1",
    # String names → str
    ('s', 'name', 'text', 'string', 'msg', 'message', 'title', 'label', 'key', 'value', 'path', 'url',
     'email', 'id'): '"test"',
    # Collection names → list
    ('items', 'values', 'elements', 'data', 'args', 'results'): "[1]",
    # Dict names → dict
    ('config', 'options', 'params', 'kwargs', 'settings', 'mapping'): '{"key": "value"}',
    # Boolean names → bool
    ('flag', 'enabled', 'active', 'valid', 'ok', 'success', 'is_valid', 'has_value'): "True",
}


def get_default_value(type_hint: str | None, param_name: str | None = None) -> str:
    """Return a valid baseline Python literal for the given type hint."""

    if type_hint:
        clean = type_hint.strip()

        if clean in DEFAULT_VALUES:
            return DEFAULT_VALUES[clean]

        # Optional[X] / X | None -> baseline of X
        if clean.startswith("Optional[") and clean.endswith("]"):
            return get_default_value(clean[9:-1], param_name)
        if clean.endswith("| None"):
            return get_default_value(clean[:-len("| None")], param_name)

        base = clean.split("[")[0]
        if base in DEFAULT_VALUES:
            return DEFAULT_VALUES[base]

    if param_name:
        clean_name = param_name.lower().lstrip('_*')

        for names, default in NAME_PATTERNS.items():
            if clean_name in names or any(clean_name.startswith(n) for n in names):
                return default

    return "None"


def generate_boundary_analysis(
    method: MethodInfo,
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> list[BoundaryAnalysis]:
    """Boundary analysis for every parameter of a method."""
    return [
        analyze_boundaries(param, classify_parameter(param, policy), maybe_constraints(param, method, policy))
        for param in method.parameters
        if param.kind not in ("var_positional", "var_keyword")
    ]


def analyze_boundaries(
    param: ParameterInfo,
    classification: TypeClassification,
    constraints: ParameterConstraints
) -> BoundaryAnalysis:
    boundaries = generate_boundary_values(classification, constraints, param.name)
    return BoundaryAnalysis(
        parameter_name=param.name,
        parameter_type=classification.type_text,
        boundaries=tuple(boundaries),
        constraints=constraints,
        recommendations=tuple(_recommendations(boundaries, classification))
    )


def generate_boundary_values(
    classification: TypeClassification,
    constraints: ParameterConstraints,
    name: str
) -> list[BoundaryValue]:
    """All boundary values for one classified parameter, grouped by type."""
    boundaries: list[BoundaryValue] = []

    if classification.is_number:
        boundaries.extend(_numeric(constraints, name))
    if classification.is_string:
        boundaries.extend(_string(constraints, name))
    if classification.is_array:
        boundaries.extend(_array(constraints, name))
    if classification.is_date:
        boundaries.extend(_date(name))
    elif classification.is_object:
        boundaries.extend(_object(name))
    if classification.is_boolean:
        boundaries.extend(_boolean(name))
    if constraints.allow_null or classification.is_nullable:
        boundaries.append(BoundaryValue("object", "empty", "None", f"None for {name}", "medium", "edge"))

    return boundaries


# =============================================================================
# Per-type catalogs
# =============================================================================

def _numeric(constraints: ParameterConstraints, name: str) -> list[BoundaryValue]:
    values = [
        BoundaryValue("numeric", "zero", "0", f"Zero value for {name}", "medium", "edge"),
        BoundaryValue("numeric", "positive", "1", f"Smallest positive value for {name}", "low", "valid"),
        BoundaryValue("numeric", "negative", "-1", f"Smallest negative value for {name}", "medium", "edge"),
        BoundaryValue("numeric", "maximum", INT_MAX, f"Maximum machine-size integer for {name}", "high", "edge"),
        BoundaryValue("numeric", "minimum", INT_MIN, f"Minimum machine-size integer for {name}", "high", "edge"),
        BoundaryValue("numeric", "overflow", "sys.float_info.max", f"Largest float for {name}", "critical", "error"),
        BoundaryValue("numeric", "overflow", "sys.float_info.min", f"Smallest positive float for {name}",
                      "critical", "error"),
        BoundaryValue("numeric", "overflow", "float('nan')", f"NaN value for {name}", "critical", "error"),
        BoundaryValue("numeric", "overflow", "float('inf')", f"Positive infinity for {name}", "critical", "error"),
        BoundaryValue("numeric", "overflow", "float('-inf')", f"Negative infinity for {name}", "critical", "error"),
    ]

    if constraints.min_value is not None:
        values.append(BoundaryValue("numeric", "minimum", repr(constraints.min_value),
                                    f"Minimum allowed value for {name}", "medium", "valid"))
        values.append(BoundaryValue("numeric", "just-below-min", repr(constraints.min_value - 1),
                                    f"Just below minimum for {name}", "high", "invalid"))
    if constraints.max_value is not None:
        values.append(BoundaryValue("numeric", "maximum", repr(constraints.max_value),
                                    f"Maximum allowed value for {name}", "medium", "valid"))
        values.append(BoundaryValue("numeric", "just-above-max", repr(constraints.max_value + 1),
                                    f"Just above maximum for {name}", "high", "invalid"))

    values.append(BoundaryValue("numeric", "overflow", "0.1 + 0.2",
                                f"Floating point precision issue for {name}", "medium", "edge"))
    return values


def _string(constraints: ParameterConstraints, name: str) -> list[BoundaryValue]:
    values = [
        BoundaryValue("string", "empty", '""', f"Empty string for {name}", "medium", "edge"),
        BoundaryValue("string", "minimum", '"a"', f"Single character string for {name}", "low", "valid"),
    ]

    if constraints.min_length is not None:
        values.append(BoundaryValue("string", "minimum", f'"a" * {constraints.min_length}',
                                    f"Minimum length string for {name}", "medium", "valid"))
        if constraints.min_length > 0:
            values.append(BoundaryValue("string", "just-below-min", f'"a" * {constraints.min_length - 1}',
                                        f"Just below minimum length for {name}", "high", "invalid"))
    if constraints.max_length is not None:
        values.append(BoundaryValue("string", "maximum", f'"a" * {constraints.max_length}',
                                    f"Maximum length string for {name}", "medium", "valid"))
        values.append(BoundaryValue("string", "just-above-max", f'"a" * {constraints.max_length + 1}',
                                    f"Just above maximum length for {name}", "high", "invalid"))

    values += [
        BoundaryValue("string", "overflow", '"a" * 100_000', f"Very long string for {name}", "critical", "error"),
        BoundaryValue("string", "overflow", '"\\x00"', f"Null byte in string for {name}", "high", "error"),
        BoundaryValue("string", "overflow", '"\\U0001F680\\U0001F389\\U0001F31F"',
                      f"Unicode characters for {name}", "medium", "edge"),
        BoundaryValue("string", "overflow", '"   "', f"Whitespace-only string for {name}", "medium", "edge"),
        BoundaryValue("string", "overflow", "\"'; DROP TABLE users; --\"",
                      f"SQL injection attempt for {name}", "critical", "error"),
        BoundaryValue("string", "overflow", "\"<script>alert('xss')</script>\"",
                      f"XSS attack attempt for {name}", "critical", "error"),
    ]
    return values


def _array(constraints: ParameterConstraints, name: str) -> list[BoundaryValue]:
    values = [
        BoundaryValue("array", "empty", "[]", f"Empty collection for {name}", "medium", "edge"),
        BoundaryValue("array", "minimum", "[1]", f"Single element collection for {name}", "low", "valid"),
    ]

    if constraints.min_length is not None:
        values.append(BoundaryValue("array", "minimum", f"[1] * {constraints.min_length}",
                                    f"Minimum size collection for {name}", "medium", "valid"))
        if constraints.min_length > 0:
            values.append(BoundaryValue("array", "just-below-min", f"[1] * {constraints.min_length - 1}",
                                        f"Just below minimum size for {name}", "high", "invalid"))
    if constraints.max_length is not None:
        values.append(BoundaryValue("array", "maximum", f"[1] * {constraints.max_length}",
                                    f"Maximum size collection for {name}", "medium", "valid"))
        values.append(BoundaryValue("array", "just-above-max", f"[1] * {constraints.max_length + 1}",
                                    f"Just above maximum size for {name}", "high", "invalid"))

    values += [
        BoundaryValue("array", "overflow", "[1] * 1_000_000", f"Very large collection for {name}", "critical", "error"),
        BoundaryValue("array", "overflow", "[None, '', 0, False]", f"Collection of falsy values for {name}",
                      "medium", "edge"),
    ]
    return values


def _date(name: str) -> list[BoundaryValue]:
    return [
        BoundaryValue("date", "minimum", "datetime.min", f"Minimum datetime for {name}", "high", "edge"),
        BoundaryValue("date", "maximum", "datetime.max", f"Maximum datetime for {name}", "high", "edge"),
        BoundaryValue("date", "overflow", "datetime.max.date().toordinal() + 1",
                      f"Ordinal beyond the maximum date for {name}", "critical", "error"),
        BoundaryValue("date", "overflow", '"invalid"', f"Invalid date string for {name}", "critical", "error"),
        BoundaryValue("date", "overflow", "datetime(1970, 1, 1)", f"Unix epoch date for {name}", "medium", "edge"),
        BoundaryValue("date", "overflow", "datetime(2038, 1, 19, 3, 14, 8)",
                      f"Year 2038 rollover for {name}", "medium", "edge"),
        BoundaryValue("date", "overflow", "datetime(2000, 2, 29)", f"Leap day for {name}", "medium", "edge"),
    ]


def _object(name: str) -> list[BoundaryValue]:
    return [
        BoundaryValue("object", "empty", "{}", f"Empty object for {name}", "medium", "edge"),
        BoundaryValue("object", "minimum", '{"key": "value"}', f"Simple object for {name}", "low", "valid"),
        BoundaryValue("object", "overflow", "(lambda d: d.update(self=d) or d)({})",
                      f"Circular reference object for {name}", "critical", "error"),
        BoundaryValue("object", "overflow", "functools.reduce(lambda acc, _: {'nested': acc}, range(100), 'deep')",
                      f"Very deep nested object for {name}", "critical", "error"),
        BoundaryValue("object", "overflow", "{f'key{i}': i for i in range(10_000)}",
                      f"Very wide object for {name}", "high", "error"),
    ]


def _boolean(name: str) -> list[BoundaryValue]:
    return [
        BoundaryValue("boolean", "minimum", "True", f"True value for {name}", "low", "valid"),
        BoundaryValue("boolean", "maximum", "False", f"False value for {name}", "low", "valid"),
    ]


def _recommendations(boundaries: list[BoundaryValue], classification: TypeClassification) -> list[str]:
    recommendations = []

    if any(b.risk_level == "critical" for b in boundaries):
        recommendations.append("Add input validation to handle critical boundary cases")
        recommendations.append("Implement error handling for overflow scenarios")
    if any(b.risk_level == "high" for b in boundaries):
        recommendations.append("Test all high-risk boundary scenarios thoroughly")
    if classification.is_number:
        recommendations.append("Validate numeric ranges to prevent overflow")
        recommendations.append("Handle special values like NaN and infinity")
    if classification.is_string:
        recommendations.append("Sanitize input to prevent injection attacks")
        recommendations.append("Validate string length limits")
    if classification.is_array:
        recommendations.append("Implement size limits to prevent memory exhaustion")

    return recommendations
