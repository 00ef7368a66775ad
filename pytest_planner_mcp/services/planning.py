"""
Planning Service - Step-by-step test generation sessions.

Wraps the SessionStore with analysis (to build the method list) and
turns "not found" answers from the store into failed ServiceResults.
The store is passed in so every tool call shares the same sessions.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..core.planner.models import MethodTestStatus, Plan, Progress, Session
from ..core.planner.session_store import SessionStore
from .analysis import AnalysisService, method_statuses
from .base import ErrorCode, ServiceResult


@dataclass(frozen=True)
class PlanResult:
    session: Session
    plan: Plan

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "session": self.session.to_dict(),
            "plan": self.plan.to_dict(),
        }


@dataclass(frozen=True)
class NextMethod:
    """The method to test next (None once every method has tests)."""
    session_id: str
    method: MethodTestStatus | None
    progress: Progress

    @property
    def done(self) -> bool:
        return self.method is None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "session_id": self.session_id,
            "done": self.done,
            "method": self.method.to_dict() if self.method else None,
            "progress": self.progress.to_dict(),
        }


@dataclass(frozen=True)
class ProgressReport:
    session: Session
    plan: Plan | None
    progress: Progress
    next_method: MethodTestStatus | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "session_id": self.session.session_id,
            "class_name": self.session.class_name,
            "progress": self.progress.to_dict(),
            "completed_methods": list(self.session.completed_methods),
            "plan": self.plan.to_dict() if self.plan else None,
            "next_method": self.next_method.to_dict() if self.next_method else None,
        }


class PlanningService:
    """Creates sessions and moves them forward one method at a time."""

    def __init__(
        self,
        store: SessionStore,
        analysis_service: AnalysisService | None = None
    ):
        self._store = store
        self._analysis = analysis_service or AnalysisService()

    @property
    def store(self) -> SessionStore:
        return self._store

    def create_plan(
        self,
        code: str | None = None,
        file_path: str | None = None,
        class_name: str | None = None,
        test_type: str | None = None,
        output_path: str | None = None
    ) -> ServiceResult[PlanResult]:
        """
        Analyze a class and open a session with its phased plan.

        Args:
            code: Direct code string
            file_path: Path to Python file
            class_name: Class to plan for (first class when omitted)
            test_type: Component type tag (detected from the class when omitted)
            output_path: Test file to write (tests/test_<module>.py when omitted)
        """
        result = self._analysis.analyze_with_metadata(code=code, file_path=file_path, class_name=class_name)
        if not result.success:
            return ServiceResult.fail(result.error.code, result.error.message, result.error.details)

        analysis, loaded = result.data
        session = self._store.create_session(
            file_path=loaded.display_path,
            class_name=analysis.class_name,
            test_type=test_type or analysis.component_type,
            output_path=output_path or default_test_path(loaded.source_path, loaded.module_name),
            methods=method_statuses(analysis)
        )
        plan = self._store.create_plan(session.session_id)

        return ServiceResult.ok(PlanResult(session=session, plan=plan))

    def next_method(self, session_id: str) -> ServiceResult[NextMethod]:
        method = self._store.get_next_method(session_id)
        progress = self._store.get_progress(session_id)
        if progress is None:
            return _session_not_found(session_id)

        return ServiceResult.ok(NextMethod(session_id=session_id, method=method, progress=progress))

    def complete_method(
        self,
        session_id: str,
        method_name: str,
        test_path: str | None = None
    ) -> ServiceResult[Progress]:
        """Mark a method as tested; unknown sessions and methods are reported, not raised."""
        session = self._store.get_session(session_id)
        if session is None:
            return _session_not_found(session_id)

        progress = self._store.complete_method(session_id, method_name, test_path or session.output_path)
        if progress is None:
            available = [m.method_name for m in session.methods]
            return ServiceResult.fail(
                ErrorCode.METHOD_NOT_FOUND,
                f"Method '{method_name}' is not part of session {session_id}. "
                f"Available methods: {', '.join(available)}",
                {"available": available}
            )

        return ServiceResult.ok(progress)

    def progress(self, session_id: str) -> ServiceResult[ProgressReport]:
        session = self._store.get_session(session_id)
        progress = self._store.get_progress(session_id)
        if session is None or progress is None:
            return _session_not_found(session_id)

        return ServiceResult.ok(ProgressReport(
            session=session,
            plan=self._store.get_plan(session_id),
            progress=progress,
            next_method=self._store.peek_next_method(session_id)
        ))


def default_test_path(source_path: str | None, module_name: str) -> str:
    """tests/test_<module>.py in a tests/ folder beside the source file."""
    if source_path is None:
        return f"tests/test_{module_name}.py"
    return str(Path(source_path).parent / "tests" / f"test_{module_name}.py")


def _session_not_found(session_id: str) -> ServiceResult:
    return ServiceResult.fail(
        ErrorCode.SESSION_NOT_FOUND,
        f"Session '{session_id}' not found (it may have expired)"
    )
