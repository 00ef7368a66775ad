"""Planner module - sessions, phased plans and progress."""

from .models import MethodTestStatus, Phase, Plan, Progress, Session, priority_for
from .session_store import SessionStore, build_phases, estimate_minutes, format_minutes

__all__ = [
    "SessionStore",
    "Session",
    "Plan",
    "Phase",
    "Progress",
    "MethodTestStatus",
    "priority_for",
    "build_phases",
    "estimate_minutes",
    "format_minutes",
]
