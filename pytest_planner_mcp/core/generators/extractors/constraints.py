"""
Constraint extraction - Guess value and length bounds from method source.

Scans the method body for simple comparisons against a parameter:

    amount > 0          -> min_value 0
    amount <= 100       -> max_value 100
    len(name) > 2       -> min_length 2
    len(name) < 50      -> max_length 50

This is a textual guess, not an inference: the comparison may guard the
error branch or the success branch. Callers get optional bounds only and
must treat a missing bound as "unknown", never as "unbounded".
"""

import re
from dataclasses import dataclass

from ...analyzer.models import MethodInfo, ParameterInfo
from ...analyzer.policy import DEFAULT_POLICY, AnalysisPolicy
from ...analyzer.type_classifier import classify_parameter

_NUMBER = r"(-?\d+(?:\.\d+)?)"


@dataclass(frozen=True)
class ParameterConstraints:
    """Bounds that may apply to a parameter. None means unknown."""
    min_value: float | None = None
    max_value: float | None = None
    min_length: int | None = None
    max_length: int | None = None
    allow_null: bool = False

    @property
    def has_bounds(self) -> bool:
        return any(v is not None for v in (self.min_value, self.max_value, self.min_length, self.max_length))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization (unknown bounds omitted)."""
        result = {"allow_null": self.allow_null}
        for key in ("min_value", "max_value", "min_length", "max_length"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        return result


def maybe_constraints(
    param: ParameterInfo,
    method: MethodInfo,
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> ParameterConstraints:
    """Extract whatever bounds the method body suggests for one parameter."""

    name = re.escape(param.name.lstrip("*"))
    source = method.source

    return ParameterConstraints(
        min_value=_first_number(rf"(?<![\w.]){name}\s*>=?\s*{_NUMBER}", source),
        max_value=_first_number(rf"(?<![\w.]){name}\s*<=?\s*{_NUMBER}", source),
        min_length=_first_int(rf"len\(\s*{name}\s*\)\s*>=?\s*(\d+)", source),
        max_length=_first_int(rf"len\(\s*{name}\s*\)\s*<=?\s*(\d+)", source),
        allow_null=classify_parameter(param, policy).is_nullable
    )


def _first_number(pattern: str, text: str) -> float | None:
    match = re.search(pattern, text)
    if not match:
        return None
    value = float(match.group(1))
    return int(value) if value.is_integer() else value


def _first_int(pattern: str, text: str) -> int | None:
    match = re.search(pattern, text)
    return int(match.group(1)) if match else None
