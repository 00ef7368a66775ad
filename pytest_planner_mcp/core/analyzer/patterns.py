"""Business Logic Pattern Detector - Group methods into CRUD, validation, transformation and workflow."""

import re
from dataclasses import dataclass
from typing import Literal

from .method_flow import MethodFlowAnalysis

PatternKind = Literal["crud", "validation", "transformation", "workflow"]

CRUD_PREFIX = re.compile(r"^(create|read|update|delete|find|get|save|remove)")
TRANSFORM_PREFIX = re.compile(r"^(transform|convert|map|parse|format)")
VALIDATION_ERROR_TYPES = frozenset({"ValidationError", "ValueError"})

CRUD_MIN_METHODS = 2
WORKFLOW_MIN_DEPENDENCIES = 2

TEST_STRATEGIES: dict[PatternKind, str] = {
    "crud": "Test each CRUD operation with success and error scenarios",
    "validation": "Test valid and invalid inputs, boundary conditions",
    "transformation": "Test input-output transformations with edge cases",
    "workflow": "Test workflow steps and failure scenarios",
}


@dataclass(frozen=True)
class BusinessLogicPattern:
    pattern: PatternKind
    methods: tuple[str, ...]
    test_strategy: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "pattern": self.pattern,
            "methods": list(self.methods),
            "test_strategy": self.test_strategy,
        }


def detect_patterns(methods: list[MethodFlowAnalysis]) -> list[BusinessLogicPattern]:
    """Detect the patterns present, in crud/validation/transformation/workflow order."""

    groups: list[tuple[PatternKind, list[str], int]] = [
        ("crud", [m.name for m in methods if CRUD_PREFIX.match(m.name)], CRUD_MIN_METHODS),
        ("validation", [
            m.name for m in methods
            if any(e.error_type in VALIDATION_ERROR_TYPES for e in m.error_paths)
        ], 1),
        ("transformation", [m.name for m in methods if TRANSFORM_PREFIX.match(m.name)], 1),
        ("workflow", [
            m.name for m in methods
            if m.flow_type == "async-chain" or len(m.dependency_usage) > WORKFLOW_MIN_DEPENDENCIES
        ], 1),
    ]

    return [
        BusinessLogicPattern(pattern=kind, methods=tuple(names), test_strategy=TEST_STRATEGIES[kind])
        for kind, names, minimum in groups
        if len(names) >= minimum
    ]
