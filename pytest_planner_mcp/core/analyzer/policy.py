"""
Analysis Policy - Swappable heuristic tables.

The analysis passes walk the AST; the keyword tables that turn what they
find into categories live here, behind a small strategy interface:

- classify_type: annotation text -> TypeClassification
- classify_error / classify_guard: raised errors and guard conditions ->
  category, severity, recoverability
- detect_side_effects: method source -> SideEffect list

Pass a custom AnalysisPolicy to the analyzers to extend or replace the
tables without touching traversal code.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from . import type_classifier
from .models import ErrorCategory, Severity, SideEffect
from .type_classifier import TypeClassification


@dataclass(frozen=True)
class ErrorClassification:
    """Category, severity and recoverability of one error path."""
    category: ErrorCategory
    severity: Severity
    recoverable: bool


class AnalysisPolicy(ABC):
    """Strategy interface for the keyword heuristics."""

    @abstractmethod
    def classify_type(self, type_text: str | None) -> TypeClassification:
        """Classify annotation text."""

    @abstractmethod
    def classify_error(self, error_type: str, message: str | None) -> ErrorClassification:
        """Classify an explicitly raised error."""

    @abstractmethod
    def classify_guard(self, condition: str) -> ErrorClassification:
        """Classify a guard condition treated as an error path."""

    @abstractmethod
    def detect_side_effects(self, source: str) -> list[SideEffect]:
        """Detect side effects in method source text."""


# =============================================================================
# Keyword tables
# =============================================================================

# Checked in this order; first match wins
ERROR_CATEGORY_KEYWORDS: list[tuple[ErrorCategory, tuple[str, ...]]] = [
    ("validation", ("validation", "invalid", "required", "valueerror", "typeerror")),
    ("security", ("permission", "unauthorized", "forbidden")),
    ("business-logic", ("not found", "notfound", "exists", "business", "keyerror", "lookuperror")),
]

# Regexes over the lowered condition; "role" must not sit inside a longer word
GUARD_CATEGORY_PATTERNS: list[tuple[ErrorCategory, re.Pattern]] = [
    ("validation", re.compile(r"none|empty|len\(")),
    ("security", re.compile(r"permission|(?<![a-z])roles?(?![a-z])")),
    ("business-logic", re.compile(r"exist|found")),
]

UNRECOVERABLE_MARKERS = ("Fatal", "Critical")

SIDE_EFFECT_KEYWORDS: list[tuple[str, tuple[str, ...], str, bool]] = [
    ("database", ("save", "create", "update", "delete", "find_one", "findone", "commit"),
     "Database operations detected", True),
    ("network", ("fetch", "axios", "http", "requests.", "urlopen"),
     "Network calls detected", True),
    ("notification", ("email", "notification", "send"),
     "Notification sending detected", True),
    ("logging", ("logger.", "logging."),
     "Logging calls detected", False),
]


class DefaultPolicy(AnalysisPolicy):
    """Keyword and substring heuristics over source text."""

    def classify_type(self, type_text: str | None) -> TypeClassification:
        return type_classifier.classify(type_text)

    def classify_error(self, error_type: str, message: str | None) -> ErrorClassification:
        text = f"{error_type} {message or ''}".lower()
        category = _first_match(text, ERROR_CATEGORY_KEYWORDS, default="system")

        if category == "security":
            return ErrorClassification("security", "critical", False)
        if category == "system" and "Database" in error_type:
            severity = "high"
        elif category == "business-logic":
            severity = "medium"
        elif category == "validation":
            severity = "low"
        else:
            severity = "medium"

        if category in ("validation", "business-logic"):
            recoverable = True
        else:
            recoverable = not any(marker in error_type for marker in UNRECOVERABLE_MARKERS)

        return ErrorClassification(category, severity, recoverable)

    def classify_guard(self, condition: str) -> ErrorClassification:
        lowered = condition.lower()
        category = next((c for c, pattern in GUARD_CATEGORY_PATTERNS if pattern.search(lowered)), None)
        negated = lowered.startswith("not ")
        if category is None:
            category = "validation" if negated else "system"

        if category == "security":
            return ErrorClassification("security", "critical", False)
        if category == "business-logic" and negated:
            return ErrorClassification(category, "medium", True)
        return ErrorClassification(category, "low", True)

    def detect_side_effects(self, source: str) -> list[SideEffect]:
        lowered = source.lower()
        return [
            SideEffect(kind=kind, description=description, needs_mocking=needs_mocking)
            for kind, keywords, description, needs_mocking in SIDE_EFFECT_KEYWORDS
            if any(keyword in lowered for keyword in keywords)
        ]


def _first_match(text: str, table, default):
    for category, keywords in table:
        if any(keyword in text for keyword in keywords):
            return category
    return default


DEFAULT_POLICY = DefaultPolicy()
