"""Tests for test scenario generation and deduplication."""

import textwrap

import pytest

from pytest_planner_mcp.core.analyzer.dependencies import analyze_dependencies
from pytest_planner_mcp.core.analyzer.method_flow import MethodFlowAnalysis, analyze_method_flows
from pytest_planner_mcp.core.errors import AnalysisInvariantError
from pytest_planner_mcp.core.generators.scenarios import Scenario, dedupe_scenarios, generate_test_scenarios
from pytest_planner_mcp.core.pipeline import load_class

USER_SERVICE = textwrap.dedent('''
    class UserService:
        def __init__(self, repo):
            self.repo = repo

        def create_user(self, email: str, *tags):
            if not email:
                raise ValueError("Email is required")
            if email.strip() == "":
                raise ValueError("Email is required")
            return self.repo.save(email)

        def rename(self, user_id: str, name: str):
            user = self.repo.find(user_id)
            user.name = name
            return self.repo.save(user)

        async def load(self, user_id: str):
            return await self.repo.find(user_id)
''')


def _generate(code=USER_SERVICE):
    cls = load_class(code)
    dependencies = analyze_dependencies(cls)
    flows = analyze_method_flows(cls, dependencies)
    return {s.method_name: s for s in generate_test_scenarios(flows, dependencies, cls)}


class TestGenerateTestScenarios:
    """Tests for generate_test_scenarios()."""

    def test_success_error_and_null_scenarios(self):
        scenarios = _generate()["create_user"].scenarios

        assert [(s.type, s.priority) for s in scenarios] == [
            ("success", 5),
            ("error", 4),
            ("edge-case", 3),
        ]

    def test_duplicate_error_paths_collapse(self):
        """Two raises with the same label yield one error scenario."""
        errors = [s for s in _generate()["create_user"].scenarios if s.type == "error"]

        assert len(errors) == 1
        assert errors[0].name == "create_user error - missing required parameter"
        assert errors[0].setup == ("Setup condition: missing required parameter",)
        assert errors[0].expectations == ("should raise ValueError",)

    def test_null_scenarios_skip_variadics(self):
        edge = [s for s in _generate()["create_user"].scenarios if s.type == "edge-case"]

        assert [s.name for s in edge] == ["create_user with null email"]
        assert edge[0].setup == ("email = None",)

    def test_one_null_scenario_per_parameter(self):
        edge = [s for s in _generate()["rename"].scenarios if s.type == "edge-case"]

        assert [s.setup for s in edge] == [("user_id = None",), ("name = None",)]

    def test_success_setup_stubs_common_methods(self):
        success = _generate()["rename"].scenarios[0]

        assert success.name == "rename success"
        assert success.setup == (
            "expected_result = object()",
            "repo_mock.save.return_value = expected_result",
            "repo_mock.find.return_value = expected_result",
        )
        assert success.expectations == ("assert result == expected_result",)

    def test_async_success_setup_uses_async_mock(self):
        success = _generate()["load"].scenarios[0]

        assert success.setup[0] == "expected_result = object()"
        assert success.setup[1] == "repo_mock.save = AsyncMock(return_value=expected_result)"

    def test_generation_is_idempotent(self):
        first = _generate()
        second = _generate()

        for name, scenario in first.items():
            keys = [s.key for s in scenario.scenarios]
            assert len(keys) == len(set(keys))
            assert set(keys) == {s.key for s in second[name].scenarios}

    def test_missing_method_is_an_invariant_error(self):
        cls = load_class(USER_SERVICE)
        ghost = MethodFlowAnalysis(name="ghost", complexity="simple", complexity_score=1, flow_type="linear")

        with pytest.raises(AnalysisInvariantError, match="ghost"):
            generate_test_scenarios([ghost], [], cls)

    def test_to_dict(self):
        data = _generate()["create_user"].to_dict()

        assert data["method_name"] == "create_user"
        assert data["scenarios"][0]["type"] == "success"
        assert isinstance(data["scenarios"][0]["setup"], list)


class TestDedupeScenarios:
    """Tests for dedupe_scenarios()."""

    def test_keeps_first_of_each_key(self):
        a = Scenario("a", "error", ("x",), ("y",), 4)
        b = Scenario("b", "error", ("x",), ("y",), 4)
        a_again = Scenario("a", "error", ("x",), ("y",), 1)

        assert dedupe_scenarios([a, b, a_again]) == [a, b]

    def test_is_idempotent(self):
        scenarios = [
            Scenario("a", "error", ("x",), ("y",), 4),
            Scenario("a", "error", ("x",), ("y",), 4),
            Scenario("a", "edge-case", ("x",), ("y",), 3),
        ]

        once = dedupe_scenarios(scenarios)

        assert dedupe_scenarios(once) == once
        assert len(once) == 2
