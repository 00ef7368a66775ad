"""Core domain logic: class analysis, test input generation and session planning."""

from .errors import (
    AnalysisError,
    AnalysisInvariantError,
    ClassNotFoundError,
    MethodNotFoundError,
    SourceSyntaxError,
)
from .pipeline import ClassAnalysis, analyze_class, analyze_class_model, load_class
from .planner import MethodTestStatus, Plan, Session, SessionStore

__all__ = [
    # Pipeline
    "analyze_class",
    "analyze_class_model",
    "load_class",
    "ClassAnalysis",
    # Planner
    "SessionStore",
    "Session",
    "Plan",
    "MethodTestStatus",
    # Errors
    "AnalysisError",
    "AnalysisInvariantError",
    "ClassNotFoundError",
    "MethodNotFoundError",
    "SourceSyntaxError",
]
