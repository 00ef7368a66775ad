"""
Method Flow Analyzer - Complexity, control-flow shape and test effort per method.

complexity score = 1 + conditionals + loops + match statements (flat count)
    <= 3  -> simple
    <= 7  -> medium
    else  -> complex

flow type, first match wins:
    error-prone  try block and an await
    async-chain  an await and more than 3 calls
    loop         any loop
    conditional  any if
    linear
"""

import math
from dataclasses import dataclass, field
from typing import Literal

from ...constants import (
    COMPLEXITY_MEDIUM_MAX,
    COMPLEXITY_SIMPLE_MAX,
    TEST_COMPLEXITY_MAX,
    TEST_COMPLEXITY_PARAMETER_WEIGHT,
)
from .dependencies import DependencyModel, dependencies_used
from .error_paths import analyze_error_paths
from .models import ClassModel, ErrorPath, MethodInfo, NodeKind, SideEffect
from .policy import DEFAULT_POLICY, AnalysisPolicy

ComplexityClass = Literal["simple", "medium", "complex"]
FlowType = Literal["linear", "conditional", "loop", "async-chain", "error-prone"]

ASYNC_CHAIN_MIN_CALLS = 3


@dataclass(frozen=True)
class MethodFlowAnalysis:
    """Control-flow characterization of one method."""
    name: str
    complexity: ComplexityClass
    complexity_score: int
    flow_type: FlowType
    dependency_usage: tuple[str, ...] = ()
    error_paths: tuple[ErrorPath, ...] = ()
    side_effects: tuple[SideEffect, ...] = ()
    test_complexity: int = 1
    suggested_test_cases: tuple[str, ...] = ()
    is_async: bool = False
    truncated: bool = field(default=False, compare=False)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "complexity": self.complexity,
            "complexity_score": self.complexity_score,
            "flow_type": self.flow_type,
            "dependency_usage": list(self.dependency_usage),
            "error_paths": [e.to_dict() for e in self.error_paths],
            "side_effects": [s.to_dict() for s in self.side_effects],
            "test_complexity": self.test_complexity,
            "suggested_test_cases": list(self.suggested_test_cases),
            "is_async": self.is_async,
        }


def analyze_method_flows(
    cls: ClassModel,
    dependencies: list[DependencyModel],
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> list[MethodFlowAnalysis]:
    """Analyze every public method of a class, in declaration order."""
    return [
        analyze_method_flow(method, dependencies, policy)
        for method in cls.methods
        if method.is_public
    ]


def analyze_method_flow(
    method: MethodInfo,
    dependencies: list[DependencyModel],
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> MethodFlowAnalysis:
    """Analyze one method. Error paths are computed first so test effort counts them."""

    score = complexity_score(method)
    flow_type = determine_flow_type(method)
    error_paths = analyze_error_paths(method, policy)
    side_effects = policy.detect_side_effects(method.source)

    return MethodFlowAnalysis(
        name=method.name,
        complexity=classify_complexity(score),
        complexity_score=score,
        flow_type=flow_type,
        dependency_usage=tuple(dependencies_used(method, dependencies)),
        error_paths=tuple(error_paths),
        side_effects=tuple(side_effects),
        test_complexity=estimate_test_complexity(len(method.parameters), error_paths, side_effects),
        suggested_test_cases=tuple(suggest_test_cases(method.name, error_paths, flow_type)),
        is_async=method.is_async,
        truncated=method.truncated
    )


def complexity_score(method: MethodInfo) -> int:
    return 1 + method.count(NodeKind.CONDITIONAL, NodeKind.LOOP, NodeKind.SWITCH)


def classify_complexity(score: int) -> ComplexityClass:
    if score <= COMPLEXITY_SIMPLE_MAX:
        return "simple"
    if score <= COMPLEXITY_MEDIUM_MAX:
        return "medium"
    return "complex"


def determine_flow_type(method: MethodInfo) -> FlowType:
    has_await = method.has(NodeKind.AWAIT)

    if has_await and method.has(NodeKind.TRY):
        return "error-prone"
    if has_await and method.count(NodeKind.CALL) > ASYNC_CHAIN_MIN_CALLS:
        return "async-chain"
    if method.has(NodeKind.LOOP):
        return "loop"
    if method.has(NodeKind.CONDITIONAL):
        return "conditional"
    return "linear"


def estimate_test_complexity(
    parameter_count: int,
    error_paths: list[ErrorPath],
    side_effects: list[SideEffect]
) -> int:
    """1 + weighted parameters + error paths + mockable side effects, rounded up and capped."""
    effort = 1.0
    effort += parameter_count * TEST_COMPLEXITY_PARAMETER_WEIGHT
    effort += len(error_paths)
    effort += sum(1 for s in side_effects if s.needs_mocking)
    return min(math.ceil(effort), TEST_COMPLEXITY_MAX)


def suggest_test_cases(name: str, error_paths: list[ErrorPath], flow_type: FlowType) -> list[str]:
    suggestions = [f"should {success_description(name)}"]

    for error_path in error_paths:
        if error_path.error_message:
            suggestions.append(f'should raise {error_path.error_type}: "{error_path.error_message}"')
        else:
            suggestions.append(f"should handle error when {error_path.condition}")

    if flow_type == "conditional":
        suggestions.append("should handle all conditional branches")

    return suggestions


def success_description(name: str) -> str:
    """Success-case wording keyed by the method name prefix."""
    for prefix in ("get_", "find_", "get", "find"):
        if name.startswith(prefix):
            subject = name[len(prefix):].replace("_", " ").strip().lower()
            return f"return {subject}" if subject else f"execute {name} successfully"
    if name.startswith("create"):
        return "create new entity successfully"
    return f"execute {name} successfully"
