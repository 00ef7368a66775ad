"""Data models for test-generation sessions and plans."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from ...constants import HIGH_PRIORITY_COMPLEXITY, MEDIUM_PRIORITY_COMPLEXITY

Priority = Literal["high", "medium", "low"]
PhasePriority = Literal["critical", "high", "medium", "low"]
PhaseStatus = Literal["pending", "active", "completed"]

PRIORITY_RANK: dict[Priority, int] = {"high": 3, "medium": 2, "low": 1}


def priority_for(complexity: int) -> Priority:
    """Priority from the raw complexity score."""
    if complexity >= HIGH_PRIORITY_COMPLEXITY:
        return "high"
    if complexity >= MEDIUM_PRIORITY_COMPLEXITY:
        return "medium"
    return "low"


@dataclass
class MethodTestStatus:
    """Test status of one method, updated in place as a session proceeds."""
    method_name: str
    complexity: int
    priority: Priority
    dependencies: list[str] = field(default_factory=list)
    error_count: int = 0
    has_tests: bool = False
    test_path: str | None = None
    last_updated: datetime | None = None

    @property
    def rank(self) -> tuple[int, int]:
        """Ordering key, higher first: priority, then complexity."""
        return (PRIORITY_RANK[self.priority], self.complexity)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "method_name": self.method_name,
            "complexity": self.complexity,
            "priority": self.priority,
            "dependencies": list(self.dependencies),
            "error_count": self.error_count,
            "has_tests": self.has_tests,
            "test_path": self.test_path,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


@dataclass
class Session:
    session_id: str
    file_path: str
    class_name: str
    test_type: str
    output_path: str
    methods: list[MethodTestStatus]
    created_at: datetime
    last_activity: datetime
    completed_methods: list[str] = field(default_factory=list)
    current_method: str | None = None

    @property
    def total_methods(self) -> int:
        return len(self.methods)

    def get_method(self, name: str) -> MethodTestStatus | None:
        for method in self.methods:
            if method.method_name == name:
                return method
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "session_id": self.session_id,
            "file_path": self.file_path,
            "class_name": self.class_name,
            "test_type": self.test_type,
            "output_path": self.output_path,
            "methods": [m.to_dict() for m in self.methods],
            "completed_methods": list(self.completed_methods),
            "current_method": self.current_method,
            "total_methods": self.total_methods,
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
        }


@dataclass
class Phase:
    phase_number: int
    name: str
    methods: list[str]
    description: str
    priority: PhasePriority
    estimated_time: str
    completed: bool = False

    def to_dict(self, status: PhaseStatus | None = None) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "phase_number": self.phase_number,
            "name": self.name,
            "methods": list(self.methods),
            "description": self.description,
            "priority": self.priority,
            "estimated_time": self.estimated_time,
            "completed": self.completed,
        }
        if status is not None:
            result["status"] = status
        return result


@dataclass
class Plan:
    session_id: str
    phases: list[Phase]
    estimated_time: str
    methodology: str
    current_phase: int = 0

    def phase_status(self, index: int) -> PhaseStatus:
        """Derived status: completed, active (at the pointer) or pending."""
        if self.phases[index].completed:
            return "completed"
        if index == self.current_phase:
            return "active"
        return "pending"

    def phase_for(self, method_name: str) -> int | None:
        for index, phase in enumerate(self.phases):
            if method_name in phase.methods:
                return index
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "session_id": self.session_id,
            "phases": [p.to_dict(self.phase_status(i)) for i, p in enumerate(self.phases)],
            "current_phase": self.current_phase,
            "estimated_time": self.estimated_time,
            "methodology": self.methodology,
        }


@dataclass(frozen=True)
class Progress:
    completed: int
    total: int
    percentage: int
    remaining: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
            "remaining": list(self.remaining),
        }
