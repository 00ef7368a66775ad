"""
Tests for the Service Layer.

Services are tested without MCP infrastructure; loaders and stores are
injected directly.
"""

import textwrap
from unittest.mock import Mock

import pytest

from pytest_planner_mcp.core.planner import SessionStore
from pytest_planner_mcp.services import (
    # Services
    AnalysisService,
    # Code loading
    CodeLoader,
    # Base
    ErrorCode,
    LoadedCode,
    PlanningService,
    ServiceError,
    ServiceResult,
    create_analysis_service,
    create_planning_service,
)
from pytest_planner_mcp.services.planning import default_test_path

ORDER_SERVICE = textwrap.dedent('''
    class OrderService:
        def __init__(self, order_repository: OrderRepository, payment_gateway: PaymentGateway):
            self.orders = order_repository
            self.payments = payment_gateway

        def place_order(self, order_id: str, amount: float) -> bool:
            if not order_id:
                raise ValueError("Order id is required")
            if amount <= 0:
                raise ValueError("Amount must be positive")
            for attempt in range(3):
                if self.payments.charge(order_id, amount):
                    self.orders.save(order_id)
                    return True
            return False

        def cancel_order(self, order_id: str) -> None:
            order = self.orders.find(order_id)
            if order is None:
                raise LookupError("Order not found")
            self.orders.delete(order)

        def format_total(self, amount: float) -> str:
            return f"{amount:.2f}"
''')


# =============================================================================
# ServiceResult Tests
# =============================================================================

class TestServiceResult:
    """Tests for the ServiceResult pattern."""

    def test_ok_creates_success_result(self):
        result = ServiceResult.ok({"key": "value"})

        assert result.success is True
        assert result.data == {"key": "value"}
        assert result.error is None

    def test_fail_creates_failure_result(self):
        result = ServiceResult.fail(
            ErrorCode.CLASS_NOT_FOUND,
            "Class 'X' not found",
            details={"available": ["A", "B"]}
        )

        assert result.success is False
        assert result.data is None
        assert result.error.code == ErrorCode.CLASS_NOT_FOUND
        assert result.error.available == ["A", "B"]

    def test_map_transforms_success(self):
        assert ServiceResult.ok(5).map(lambda x: x * 2).data == 10

    def test_map_preserves_failure(self):
        mapped = ServiceResult.fail(ErrorCode.INTERNAL_ERROR, "error").map(lambda x: x * 2)

        assert mapped.success is False
        assert mapped.error.message == "error"

    def test_unwrap_raises_on_failure(self):
        result = ServiceResult.fail(ErrorCode.FILE_NOT_FOUND, "File not found")

        with pytest.raises(ValueError, match="File not found"):
            result.unwrap()

    def test_unwrap_or_returns_default_on_failure(self):
        result = ServiceResult.fail(ErrorCode.INTERNAL_ERROR, "error")

        assert result.unwrap_or("default") == "default"
        assert ServiceResult.ok("hello").unwrap_or("default") == "hello"

    def test_error_to_dict(self):
        error = ServiceError(
            code=ErrorCode.METHOD_NOT_FOUND,
            message="Method 'x' not found",
            details={"available": ["a"]}
        )

        assert error.to_dict() == {
            "code": "method_not_found",
            "message": "Method 'x' not found",
            "details": {"available": ["a"]},
        }

    def test_error_without_details_has_no_available(self):
        error = ServiceError(code=ErrorCode.SYNTAX_ERROR, message="bad")

        assert error.available == []
        assert "details" not in error.to_dict()


# =============================================================================
# CodeLoader Tests
# =============================================================================

class TestCodeLoader:
    """Tests for CodeLoader."""

    def test_load_from_string(self):
        result = CodeLoader().load(code="class A:\n    pass\n")

        assert result.success is True
        assert result.data.module_name == "module"
        assert result.data.source_path is None
        assert result.data.display_path == "<inline>"

    def test_load_requires_code_or_file(self):
        result = CodeLoader().load()

        assert result.success is False
        assert result.error.code == ErrorCode.MISSING_INPUT

    def test_load_rejects_too_large_code(self):
        result = CodeLoader(max_size=10).load(code="x = 1\n" * 10)

        assert result.success is False
        assert result.error.code == ErrorCode.FILE_TOO_LARGE

    def test_load_validates_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("class A: pass")

        result = CodeLoader().load(file_path=str(path))

        assert result.success is False
        assert result.error.code == ErrorCode.INVALID_EXTENSION

    def test_load_from_real_file(self, tmp_path):
        path = tmp_path / "orders.py"
        path.write_text(ORDER_SERVICE)

        result = CodeLoader().load(file_path=str(path))

        assert result.success is True
        assert result.data.content == ORDER_SERVICE
        assert result.data.module_name == "orders"
        assert result.data.source_path == str(path)

    def test_file_wins_over_code(self, tmp_path):
        path = tmp_path / "orders.py"
        path.write_text(ORDER_SERVICE)

        result = CodeLoader().load(code="class Other: pass", file_path=str(path))

        assert result.data.content == ORDER_SERVICE

    def test_load_file_not_found(self, tmp_path):
        result = CodeLoader().load(file_path=str(tmp_path / "missing.py"))

        assert result.success is False
        assert result.error.code == ErrorCode.FILE_NOT_FOUND

    def test_missing_file_falls_back_to_code(self, tmp_path):
        result = CodeLoader().load(code="class A: pass", file_path=str(tmp_path / "users.py"))

        assert result.success is True
        assert result.data.content == "class A: pass"
        assert result.data.module_name == "users"
        assert result.data.source_path is None

    def test_directory_is_rejected(self, tmp_path):
        folder = tmp_path / "pkg.py"
        folder.mkdir()

        result = CodeLoader().load(file_path=str(folder))

        assert result.error.code == ErrorCode.VALIDATION_ERROR


# =============================================================================
# AnalysisService Tests
# =============================================================================

class TestAnalysisService:
    """Tests for AnalysisService."""

    def test_analyze_class(self):
        result = AnalysisService().analyze(code=ORDER_SERVICE)

        assert result.success is True
        assert result.data.class_name == "OrderService"
        assert result.data.component_type == "service"
        assert [m.name for m in result.data.methods] == ["place_order", "cancel_order", "format_total"]

    def test_analyze_syntax_error(self):
        result = AnalysisService().analyze(code="class Broken(\n")

        assert result.success is False
        assert result.error.code == ErrorCode.SYNTAX_ERROR

    def test_analyze_unknown_class_lists_available(self):
        result = AnalysisService().analyze(code=ORDER_SERVICE, class_name="Missing")

        assert result.error.code == ErrorCode.CLASS_NOT_FOUND
        assert result.error.available == ["OrderService"]

    def test_analyze_unknown_method_lists_available(self):
        result = AnalysisService().analyze(code=ORDER_SERVICE, method_name="refund")

        assert result.error.code == ErrorCode.METHOD_NOT_FOUND
        assert result.error.available == ["place_order", "cancel_order", "format_total"]

    def test_analyze_no_classes(self):
        result = AnalysisService().analyze(code="def add(a, b):\n    return a + b\n")

        assert result.error.code == ErrorCode.CLASS_NOT_FOUND
        assert result.error.available == []

    def test_analyze_with_custom_loader(self):
        """Loader failures pass through unchanged."""
        mock_loader = Mock(spec=CodeLoader)
        mock_loader.load.return_value = ServiceResult.fail(ErrorCode.PERMISSION_DENIED, "Permission denied: x.py")

        result = AnalysisService(code_loader=mock_loader).analyze(file_path="x.py")

        mock_loader.load.assert_called_once_with(code=None, file_path="x.py")
        assert result.error.code == ErrorCode.PERMISSION_DENIED

    def test_analyze_with_metadata(self):
        mock_loader = Mock(spec=CodeLoader)
        mock_loader.load.return_value = ServiceResult.ok(
            LoadedCode(content=ORDER_SERVICE, module_name="orders", source_path="app/orders.py")
        )

        result = create_analysis_service(mock_loader).analyze_with_metadata(file_path="app/orders.py")

        analysis, loaded = result.data
        assert analysis.class_name == "OrderService"
        assert loaded.module_name == "orders"

    def test_list_methods(self):
        result = AnalysisService().list_methods(code=ORDER_SERVICE)

        listing = result.data
        rows = {m.method_name: m for m in listing.methods}

        assert list(rows) == ["place_order", "cancel_order", "format_total"]
        assert rows["place_order"].error_count == 2
        assert rows["place_order"].dependencies == ["order_repository", "payment_gateway"]
        assert rows["format_total"].priority == "low"
        assert all(not m.has_tests for m in listing.methods)
        assert listing.recommended_order[0] == "place_order"
        assert listing.recommended_order[-1] == "format_total"

    def test_list_methods_failure(self):
        result = AnalysisService().list_methods(code=ORDER_SERVICE, class_name="Nope")

        assert result.error.code == ErrorCode.CLASS_NOT_FOUND


# =============================================================================
# PlanningService Tests
# =============================================================================

@pytest.fixture
def planning():
    return PlanningService(SessionStore())


class TestPlanningService:
    """Tests for PlanningService."""

    def test_create_plan(self, planning):
        result = planning.create_plan(code=ORDER_SERVICE)

        session = result.data.session
        plan = result.data.plan

        assert result.success is True
        assert session.class_name == "OrderService"
        assert session.test_type == "service"
        assert session.file_path == "<inline>"
        assert session.output_path == "tests/test_module.py"
        assert session.total_methods == 3
        placed = sorted(name for phase in plan.phases for name in phase.methods)
        assert placed == ["cancel_order", "format_total", "place_order"]

    def test_create_plan_from_file(self, planning, tmp_path):
        path = tmp_path / "orders.py"
        path.write_text(ORDER_SERVICE)

        session = planning.create_plan(file_path=str(path)).data.session

        assert session.file_path == str(path)
        assert session.output_path == str(tmp_path / "tests" / "test_orders.py")

    def test_create_plan_overrides(self, planning):
        session = planning.create_plan(
            code=ORDER_SERVICE,
            test_type="unit",
            output_path="custom/test_orders.py"
        ).data.session

        assert session.test_type == "unit"
        assert session.output_path == "custom/test_orders.py"

    def test_create_plan_failure_opens_no_session(self, planning):
        result = planning.create_plan(code=ORDER_SERVICE, class_name="Missing")

        assert result.error.code == ErrorCode.CLASS_NOT_FOUND
        assert planning.store.active_sessions() == []

    def test_walk_through_session(self, planning):
        session_id = planning.create_plan(code=ORDER_SERVICE).data.session.session_id

        completed = []
        while not (step := planning.next_method(session_id).data).done:
            completed.append(step.method.method_name)
            planning.complete_method(session_id, step.method.method_name)

        report = planning.progress(session_id).data
        assert sorted(completed) == ["cancel_order", "format_total", "place_order"]
        assert report.progress.percentage == 100
        assert report.next_method is None
        assert step.progress.remaining == ()

    def test_complete_method_defaults_test_path(self, planning):
        session = planning.create_plan(code=ORDER_SERVICE).data.session

        planning.complete_method(session.session_id, "format_total")

        assert session.get_method("format_total").test_path == "tests/test_module.py"

    def test_complete_unknown_method(self, planning):
        session_id = planning.create_plan(code=ORDER_SERVICE).data.session.session_id

        result = planning.complete_method(session_id, "refund")

        assert result.error.code == ErrorCode.METHOD_NOT_FOUND
        assert result.error.available == ["place_order", "cancel_order", "format_total"]

    @pytest.mark.parametrize("call", [
        lambda service: service.next_method("test-session-missing"),
        lambda service: service.complete_method("test-session-missing", "x"),
        lambda service: service.progress("test-session-missing"),
    ])
    def test_unknown_session(self, planning, call):
        result = call(planning)

        assert result.error.code == ErrorCode.SESSION_NOT_FOUND
        assert "may have expired" in result.error.message

    def test_progress_report(self, planning):
        session_id = planning.create_plan(code=ORDER_SERVICE).data.session.session_id

        data = planning.progress(session_id).data.to_dict()

        assert data["class_name"] == "OrderService"
        assert data["progress"]["percentage"] == 0
        assert data["plan"]["phases"][0]["status"] == "active"
        assert data["next_method"]["method_name"] == "place_order"

    def test_factory_shares_store(self):
        store = SessionStore()
        service = create_planning_service(store)

        session_id = service.create_plan(code=ORDER_SERVICE).data.session.session_id

        assert store.get_session(session_id) is not None


class TestDefaultTestPath:
    """Tests for default_test_path()."""

    def test_inline_code(self):
        assert default_test_path(None, "module") == "tests/test_module.py"

    def test_beside_source(self):
        assert default_test_path("app/users.py", "users") == "app/tests/test_users.py"
