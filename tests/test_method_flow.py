"""Tests for method complexity, flow type, test effort and suggestions."""

import textwrap

import pytest

from pytest_planner_mcp.core.analyzer.dependencies import analyze_dependencies
from pytest_planner_mcp.core.analyzer.method_flow import (
    analyze_method_flow,
    analyze_method_flows,
    classify_complexity,
    complexity_score,
    determine_flow_type,
    estimate_test_complexity,
    success_description,
    suggest_test_cases,
)
from pytest_planner_mcp.core.analyzer.models import ErrorPath, SideEffect
from pytest_planner_mcp.core.pipeline import load_class

FLOWS = textwrap.dedent('''
    class Flows:
        def __init__(self, repo, client):
            self.repo = repo
            self.client = client

        def process(self, items):
            for item in items:
                if item:
                    if item.ready:
                        self.handle(item)

        def choose(self, flag):
            if flag:
                return 1
            return 2

        def plain(self):
            return 42

        async def guarded(self):
            try:
                return await self.client.get()
            except OSError:
                return None

        async def chain(self):
            a = await self.client.one()
            b = await self.client.two()
            c = await self.repo.three()
            return self.merge(a, b, c)

        def _hidden(self):
            pass
''')


def _method(name):
    return load_class(FLOWS).get_method(name)


# =============================================================================
# Complexity
# =============================================================================

class TestComplexity:
    """Tests for the complexity score and its classes."""

    @pytest.mark.parametrize("score,expected", [
        (1, "simple"),
        (3, "simple"),
        (4, "medium"),
        (7, "medium"),
        (8, "complex"),
        (20, "complex"),
    ])
    def test_thresholds(self, score, expected):
        assert classify_complexity(score) == expected

    def test_nested_conditionals_and_loop(self):
        """Two nested ifs and a loop score 4: medium, and the loop wins the flow type."""
        method = _method("process")

        flow = analyze_method_flow(method, [])

        assert complexity_score(method) == 4
        assert flow.complexity == "medium"
        assert flow.flow_type == "loop"

    def test_match_statement_counts(self):
        code = textwrap.dedent('''
            class Router:
                def route(self, command):
                    match command:
                        case "a":
                            return 1
                        case _:
                            return 0
        ''')

        assert complexity_score(load_class(code).get_method("route")) == 2


# =============================================================================
# Flow type
# =============================================================================

class TestFlowType:
    """Tests for determine_flow_type()."""

    @pytest.mark.parametrize("name,expected", [
        ("process", "loop"),
        ("choose", "conditional"),
        ("plain", "linear"),
        ("guarded", "error-prone"),
        ("chain", "async-chain"),
    ])
    def test_flow_types(self, name, expected):
        assert determine_flow_type(_method(name)) == expected


# =============================================================================
# Test effort
# =============================================================================

class TestTestComplexity:
    """Tests for estimate_test_complexity()."""

    def test_counts_params_errors_and_mockable_effects(self):
        error = ErrorPath(condition="x", error_type="E", category="system", severity="low", recoverable=True)
        effects = [
            SideEffect("database", "Database operations detected"),
            SideEffect("logging", "Logging calls detected", needs_mocking=False),
        ]

        assert estimate_test_complexity(2, [error], effects) == 4

    def test_rounds_up(self):
        assert estimate_test_complexity(1, [], []) == 2

    def test_capped(self):
        assert estimate_test_complexity(30, [], []) == 10

    def test_flow_counts_real_error_paths(self):
        code = textwrap.dedent('''
            class UserService:
                def __init__(self, repo):
                    self.repo = repo

                def create_user(self, email: str):
                    if not email:
                        raise ValueError("Email is required")
                    return self.repo.save(email)
        ''')
        cls = load_class(code)

        flow = analyze_method_flow(cls.get_method("create_user"), analyze_dependencies(cls))

        # 1 + 0.5 (one param) + 1 error path + database + notification
        assert flow.test_complexity == 5
        assert [s.kind for s in flow.side_effects] == ["database", "notification"]
        assert flow.dependency_usage == ("repo",)


# =============================================================================
# Suggestions
# =============================================================================

class TestSuggestions:
    """Tests for suggested test case wording."""

    @pytest.mark.parametrize("name,expected", [
        ("get_user", "return user"),
        ("find_open_orders", "return open orders"),
        ("getUser", "return user"),
        ("create_order", "create new entity successfully"),
        ("process", "execute process successfully"),
        ("get", "execute get successfully"),
    ])
    def test_success_description(self, name, expected):
        assert success_description(name) == expected

    def test_error_and_branch_suggestions(self):
        with_message = ErrorPath(condition="missing required parameter", error_type="ValueError",
                                 category="validation", severity="low", recoverable=True,
                                 error_message="Email is required")
        without_message = ErrorPath(condition="value is None", error_type="NullReferenceError",
                                    category="validation", severity="low", recoverable=True)

        suggestions = suggest_test_cases("get_user", [with_message, without_message], "conditional")

        assert suggestions == [
            "should return user",
            'should raise ValueError: "Email is required"',
            "should handle error when value is None",
            "should handle all conditional branches",
        ]


# =============================================================================
# Class-level
# =============================================================================

class TestAnalyzeMethodFlows:
    """Tests for analyze_method_flows()."""

    def test_only_public_methods(self):
        cls = load_class(FLOWS)

        flows = analyze_method_flows(cls, analyze_dependencies(cls))

        assert [f.name for f in flows] == ["process", "choose", "plain", "guarded", "chain"]

    def test_async_flag_and_dependencies(self):
        cls = load_class(FLOWS)
        flows = {f.name: f for f in analyze_method_flows(cls, analyze_dependencies(cls))}

        assert flows["chain"].is_async is True
        assert flows["chain"].dependency_usage == ("repo", "client")
        assert flows["plain"].dependency_usage == ()

    def test_to_dict(self):
        cls = load_class(FLOWS)

        data = analyze_method_flow(cls.get_method("choose"), []).to_dict()

        assert data["complexity"] == "simple"
        assert data["complexity_score"] == 2
        assert data["flow_type"] == "conditional"
        assert data["suggested_test_cases"][-1] == "should handle all conditional branches"
