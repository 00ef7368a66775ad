"""Tests for business logic pattern detection."""

from pytest_planner_mcp.core.analyzer.method_flow import MethodFlowAnalysis
from pytest_planner_mcp.core.analyzer.models import ErrorPath
from pytest_planner_mcp.core.analyzer.patterns import detect_patterns


def _flow(name, flow_type="linear", error_types=(), dependencies=()):
    return MethodFlowAnalysis(
        name=name,
        complexity="simple",
        complexity_score=1,
        flow_type=flow_type,
        dependency_usage=tuple(dependencies),
        error_paths=tuple(
            ErrorPath(condition="x", error_type=t, category="validation", severity="low", recoverable=True)
            for t in error_types
        ),
    )


class TestDetectPatterns:
    """Tests for detect_patterns()."""

    def test_crud_needs_two_methods(self):
        single = detect_patterns([_flow("create_user"), _flow("notify")])
        pair = detect_patterns([_flow("create_user"), _flow("get_user"), _flow("notify")])

        assert single == []
        assert pair[0].pattern == "crud"
        assert pair[0].methods == ("create_user", "get_user")

    def test_validation_from_error_types(self):
        patterns = detect_patterns([_flow("check", error_types=["ValueError"]), _flow("other")])

        assert [p.pattern for p in patterns] == ["validation"]
        assert patterns[0].methods == ("check",)

    def test_transformation_prefix(self):
        patterns = detect_patterns([_flow("parse_date"), _flow("format_name")])

        assert patterns[0].pattern == "transformation"
        assert patterns[0].methods == ("parse_date", "format_name")

    def test_workflow_from_async_chain_or_dependencies(self):
        patterns = detect_patterns([
            _flow("sync", flow_type="async-chain"),
            _flow("checkout", dependencies=["repo", "payments", "mailer"]),
            _flow("small", dependencies=["repo", "payments"]),
        ])

        assert [p.pattern for p in patterns] == ["workflow"]
        assert patterns[0].methods == ("sync", "checkout")

    def test_patterns_keep_fixed_order(self):
        patterns = detect_patterns([
            _flow("convert_units", flow_type="async-chain"),
            _flow("create_item", error_types=["ValidationError"]),
            _flow("delete_item"),
        ])

        assert [p.pattern for p in patterns] == ["crud", "validation", "transformation", "workflow"]

    def test_to_dict(self):
        data = detect_patterns([_flow("parse_date")])[0].to_dict()

        assert data == {
            "pattern": "transformation",
            "methods": ["parse_date"],
            "test_strategy": "Test input-output transformations with edge cases",
        }
