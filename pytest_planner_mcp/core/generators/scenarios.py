"""Test Scenario Generator - Prioritized success, error and null-input scenarios per method."""

from dataclasses import dataclass
from typing import Literal

from ..analyzer.dependencies import DependencyModel
from ..analyzer.method_flow import MethodFlowAnalysis
from ..analyzer.models import ClassModel
from ..errors import AnalysisInvariantError

ScenarioType = Literal["success", "error", "edge-case"]

SUCCESS_PRIORITY = 5
ERROR_PRIORITY = 4
EDGE_CASE_PRIORITY = 3


@dataclass(frozen=True)
class Scenario:
    name: str
    type: ScenarioType
    setup: tuple[str, ...]
    expectations: tuple[str, ...]
    priority: int

    @property
    def key(self) -> tuple:
        """Identity used for deduplication."""
        return (self.name, self.type, self.setup, self.expectations)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": self.type,
            "setup": list(self.setup),
            "expectations": list(self.expectations),
            "priority": self.priority,
        }


@dataclass(frozen=True)
class TestScenario:
    """All scenarios for one method."""
    __test__ = False  # not a pytest class

    method_name: str
    scenarios: tuple[Scenario, ...]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "method_name": self.method_name,
            "scenarios": [s.to_dict() for s in self.scenarios],
        }


def generate_test_scenarios(
    methods: list[MethodFlowAnalysis],
    dependencies: list[DependencyModel],
    cls: ClassModel
) -> list[TestScenario]:
    """
    Build scenarios for every analyzed method.

    Raises:
        AnalysisInvariantError: an analyzed method is missing from its own class
    """
    results = []

    for flow in methods:
        method = cls.get_method(flow.name)
        if method is None:
            raise AnalysisInvariantError(f"Method '{flow.name}' was analyzed but is not defined in '{cls.name}'")

        scenarios: list[Scenario] = [_success_scenario(flow, dependencies, method.is_async)]
        scenarios += [
            Scenario(
                name=f"{flow.name} error - {error.condition}",
                type="error",
                setup=(f"Setup condition: {error.condition}",),
                expectations=(f"should raise {error.error_type}",),
                priority=ERROR_PRIORITY
            )
            for error in flow.error_paths
        ]
        scenarios += [
            Scenario(
                name=f"{flow.name} with null {param.name}",
                type="edge-case",
                setup=(f"{param.name} = None",),
                expectations=(f"with pytest.raises(Exception): {flow.name}({param.name}=None)",),
                priority=EDGE_CASE_PRIORITY
            )
            for param in method.parameters
            if param.kind not in ("var_positional", "var_keyword")
        ]

        results.append(TestScenario(method_name=flow.name, scenarios=tuple(dedupe_scenarios(scenarios))))

    return results


def dedupe_scenarios(scenarios: list[Scenario]) -> list[Scenario]:
    """Keep the first scenario for each (name, type, setup, expectations) key."""
    seen = set()
    unique = []
    for scenario in scenarios:
        if scenario.key in seen:
            continue
        seen.add(scenario.key)
        unique.append(scenario)
    return unique


def _success_scenario(flow: MethodFlowAnalysis, dependencies: list[DependencyModel], is_async: bool) -> Scenario:
    by_name = {dep.name: dep for dep in dependencies}
    # The sentinel is bound before any stub refers to it
    setup = ["expected_result = object()"]

    for dep_name in flow.dependency_usage:
        dep = by_name.get(dep_name)
        if dep is None:
            continue
        for member in dep.common_methods:
            if is_async:
                setup.append(f"{dep_name}_mock.{member} = AsyncMock(return_value=expected_result)")
            else:
                setup.append(f"{dep_name}_mock.{member}.return_value = expected_result")

    return Scenario(
        name=f"{flow.name} success",
        type="success",
        setup=tuple(setup),
        expectations=("assert result == expected_result",),
        priority=SUCCESS_PRIORITY
    )
