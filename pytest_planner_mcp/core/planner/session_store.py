"""
Session Store - In-memory sessions and plans for step-by-step test generation.

One store is created at process start and shared by every tool call. All
reads and writes go through one re-entrant lock, including the periodic
cleanup sweep, so a caller that asks for the next method and then marks it
complete always sees a consistent untested set.

Unknown session ids and method names never raise: lookups return None and
mutations return False.
"""

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta

from ...constants import (
    DEPENDENCY_MINUTES,
    HIGH_PRIORITY_COMPLEXITY,
    MEDIUM_PRIORITY_COMPLEXITY,
    PHASE_MINUTES,
    PLAN_METHODOLOGY,
    SESSION_ID_PREFIX,
    SESSION_RETENTION_SECONDS,
)
from .models import MethodTestStatus, Phase, Plan, Progress, Session

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Owns every Session and Plan.

    Args:
        retention_seconds: Idle time after which cleanup() drops a session
        clock: Returns the current time (inject a fake clock in tests)
    """

    def __init__(
        self,
        retention_seconds: float = SESSION_RETENTION_SECONDS,
        clock: Callable[[], datetime] | None = None
    ):
        self._sessions: dict[str, Session] = {}
        self._plans: dict[str, Plan] = {}
        self._lock = threading.RLock()
        self._retention = timedelta(seconds=retention_seconds)
        self._clock = clock or datetime.now

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(
        self,
        file_path: str,
        class_name: str,
        test_type: str,
        output_path: str,
        methods: list[MethodTestStatus]
    ) -> Session:
        """Start a session with its own copy of the method statuses."""
        now = self._clock()
        session = Session(
            session_id=self._new_session_id(now),
            file_path=file_path,
            class_name=class_name,
            test_type=test_type,
            output_path=output_path,
            methods=[replace(m, dependencies=list(m.dependencies)) for m in methods],
            created_at=now,
            last_activity=now
        )

        with self._lock:
            self._sessions[session.session_id] = session

        logger.info(f"Created session {session.session_id} for {class_name} ({len(methods)} methods)")
        return session

    def get_session(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def get_next_method(self, session_id: str) -> MethodTestStatus | None:
        """
        Highest-ranked untested method (priority, then complexity).

        Ties keep declaration order. None when the session is unknown or
        every method has tests. The method becomes the session's current one.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            next_method = self.peek_next_method(session_id)
            if next_method is None:
                session.current_method = None
                return None

            session.current_method = next_method.method_name
            session.last_activity = self._clock()
            return next_method

    def peek_next_method(self, session_id: str) -> MethodTestStatus | None:
        """Same choice as get_next_method, without touching the session."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            untested = [m for m in session.methods if not m.has_tests]
            if not untested:
                return None
            return max(untested, key=lambda m: m.rank)

    def update_method_status(
        self,
        session_id: str,
        method_name: str,
        has_tests: bool = True,
        test_path: str | None = None
    ) -> bool:
        """
        Record a method's test status.

        A tested method joins the completed list once. Marking a completed
        method untested takes it off the list and re-opens its plan phase.
        """
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False

            method = session.get_method(method_name)
            if method is None:
                return False

            now = self._clock()
            method.has_tests = has_tests
            method.test_path = test_path
            method.last_updated = now

            if has_tests:
                if method_name not in session.completed_methods:
                    session.completed_methods.append(method_name)
            elif method_name in session.completed_methods:
                session.completed_methods.remove(method_name)
                self._reopen_phase(session_id, method_name)
            if session.current_method == method_name:
                session.current_method = None

            session.last_activity = now
            return True

    def get_progress(self, session_id: str) -> Progress | None:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            completed = len(session.completed_methods)
            total = session.total_methods
            return Progress(
                completed=completed,
                total=total,
                percentage=_percentage(completed, total),
                remaining=tuple(m.method_name for m in session.methods if not m.has_tests)
            )

    def complete_method(self, session_id: str, method_name: str, test_path: str | None = None) -> Progress | None:
        """
        Mark a method tested and advance the plan in one step.

        Returns:
            Updated progress, or None for an unknown session or method
        """
        with self._lock:
            if not self.update_method_status(session_id, method_name, True, test_path):
                return None
            self.update_plan_progress(session_id, method_name)
            progress = self.get_progress(session_id)

        logger.info(f"Session {session_id}: completed {method_name} ({progress.completed}/{progress.total})")
        return progress

    # =========================================================================
    # Plans
    # =========================================================================

    def create_plan(self, session_id: str, methods: list[MethodTestStatus] | None = None) -> Plan | None:
        """Partition the session's methods into phases (None for an unknown session)."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            methods = session.methods if methods is None else methods
            plan = Plan(
                session_id=session_id,
                phases=build_phases(methods),
                estimated_time=format_minutes(estimate_minutes(methods)),
                methodology=PLAN_METHODOLOGY
            )
            self._plans[session_id] = plan
            return plan

    def get_plan(self, session_id: str) -> Plan | None:
        with self._lock:
            return self._plans.get(session_id)

    def update_plan_progress(self, session_id: str, method_name: str) -> bool:
        """
        Re-check the phase holding a method.

        The phase is marked completed once all of its methods are in the
        session's completed list. When that phase is the current one, the
        pointer moves past every completed phase (stopping at the last).
        """
        with self._lock:
            plan = self._plans.get(session_id)
            session = self._sessions.get(session_id)
            if plan is None or session is None:
                return False

            index = plan.phase_for(method_name)
            if index is None:
                return False

            phase = plan.phases[index]
            if all(name in session.completed_methods for name in phase.methods):
                phase.completed = True
                if index == plan.current_phase:
                    last = len(plan.phases) - 1
                    while plan.current_phase < last and plan.phases[plan.current_phase].completed:
                        plan.current_phase += 1

            return True

    def _reopen_phase(self, session_id: str, method_name: str) -> None:
        """Un-complete the phase holding a method and move the pointer back to it."""
        plan = self._plans.get(session_id)
        index = plan.phase_for(method_name) if plan is not None else None
        if index is None:
            return
        plan.phases[index].completed = False
        plan.current_phase = min(plan.current_phase, index)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def cleanup(self) -> list[str]:
        """Drop every session (and its plan) idle longer than the retention window."""
        cutoff = self._clock() - self._retention

        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if s.last_activity < cutoff]
            for session_id in expired:
                del self._sessions[session_id]
                self._plans.pop(session_id, None)

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired session(s)")
        return expired

    def active_sessions(self) -> list[Session]:
        with self._lock:
            return list(self._sessions.values())

    def _new_session_id(self, now: datetime) -> str:
        return f"{SESSION_ID_PREFIX}-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"


# =============================================================================
# Planning helpers
# =============================================================================

def build_phases(methods: list[MethodTestStatus]) -> list[Phase]:
    """
    Split methods into at most three disjoint phases.

    Phase 1: high priority or complexity >= 8
    Phase 2: remaining medium priority, complexity 4-7, or any dependency
    Phase 3: everything else

    Empty phases are left out; the others keep their numbers.
    """
    critical = [m for m in methods if m.priority == "high" or m.complexity >= HIGH_PRIORITY_COMPLEXITY]
    placed = {m.method_name for m in critical}

    core = [
        m for m in methods
        if m.method_name not in placed and (
            m.priority == "medium"
            or MEDIUM_PRIORITY_COMPLEXITY <= m.complexity < HIGH_PRIORITY_COMPLEXITY
            or m.dependencies
        )
    ]
    placed |= {m.method_name for m in core}

    simple = [m for m in methods if m.method_name not in placed]

    specs = [
        (1, "Critical Methods", critical, "Test core business logic and high-complexity methods first", "critical"),
        (2, "Core Methods", core, "Test methods with dependencies and moderate complexity", "high"),
        (3, "Utility Methods", simple, "Test simple utility and helper methods", "medium"),
    ]

    return [
        Phase(
            phase_number=number,
            name=name,
            methods=[m.method_name for m in members],
            description=description,
            priority=priority,
            estimated_time=f"{len(members) * PHASE_MINUTES[number]}min"
        )
        for number, name, members, description, priority in specs
        if members
    ]


def estimate_minutes(methods: list[MethodTestStatus]) -> int:
    """Per method: 8/5/3 minutes by complexity plus 2 per dependency."""
    total = 0
    for method in methods:
        if method.complexity >= HIGH_PRIORITY_COMPLEXITY:
            base = PHASE_MINUTES[1]
        elif method.complexity >= MEDIUM_PRIORITY_COMPLEXITY:
            base = PHASE_MINUTES[2]
        else:
            base = PHASE_MINUTES[3]
        total += base + len(method.dependencies) * DEPENDENCY_MINUTES
    return total


def format_minutes(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}min"
    return f"{minutes // 60}h {minutes % 60}min"


def _percentage(completed: int, total: int) -> int:
    if total == 0:
        return 0
    # Round half up
    return int(completed * 100 / total + 0.5)
