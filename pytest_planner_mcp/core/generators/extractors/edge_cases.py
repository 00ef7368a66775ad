"""
Edge Case Detector - Adversarial inputs per parameter and per method context.

Every case has a kind from the closed EdgeCaseKind enum. The catalog maps
each kind to its description, sample value (a Python expression), expected
behaviour, severity and category.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from ...analyzer.error_paths import callee_name
from ...analyzer.models import MethodInfo, NodeKind, ParameterInfo
from ...analyzer.policy import DEFAULT_POLICY, AnalysisPolicy
from ...analyzer.type_classifier import TypeClassification, classify_parameter
from .constraints import ParameterConstraints, maybe_constraints

ExpectedBehavior = Literal["error", "graceful", "empty-result", "timeout", "security-block"]
EdgeSeverity = Literal["low", "medium", "high", "critical"]
EdgeCategory = Literal[
    "input-validation", "type-safety", "concurrency", "security", "performance", "business-logic"
]


class EdgeCaseKind(str, Enum):
    EMPTY_ARRAY = "empty-array"
    LARGE_ARRAY = "large-array"
    NULL_INPUT = "null-input"
    OMITTED_ARGUMENT = "omitted-argument"
    EMPTY_STRING = "empty-string"
    LONG_STRING = "long-string"
    WHITESPACE_STRING = "whitespace-string"
    SPECIAL_CHARS = "special-chars"
    ZERO_NUMBER = "zero-number"
    NEGATIVE_NUMBER = "negative-number"
    BOUNDARY_NUMBER = "boundary-number"
    NAN_INFINITY = "nan-infinity"
    PRECISION_LOSS = "precision-loss"
    TYPE_COERCION = "type-coercion"
    EMPTY_OBJECT = "empty-object"
    CIRCULAR_REFERENCE = "circular-reference"
    DATE_INVALID = "date-invalid"
    DATE_BOUNDARY = "date-boundary"
    SQL_INJECTION = "sql-injection"
    XSS_PAYLOAD = "xss-payload"
    PATH_TRAVERSAL = "path-traversal"
    REGEX_DOS = "regex-dos"
    BUFFER_OVERFLOW = "buffer-overflow"
    ASYNC_TIMEOUT = "async-timeout"
    ASYNC_RACE_CONDITION = "async-race-condition"
    FUTURE_REJECTION = "future-rejection"
    CONCURRENT_MODIFICATION = "concurrent-modification"
    DEADLOCK_SCENARIO = "deadlock-scenario"
    MEMORY_EXHAUSTION = "memory-exhaustion"
    DUPLICATE_CREATION = "duplicate-creation"
    CASCADE_DELETE = "cascade-delete"


@dataclass(frozen=True)
class _CatalogEntry:
    description: str            # "{name}" is replaced by the parameter name
    sample_value: str
    expected_behavior: ExpectedBehavior
    severity: EdgeSeverity
    category: EdgeCategory


K = EdgeCaseKind

CATALOG: dict[EdgeCaseKind, _CatalogEntry] = {
    K.EMPTY_ARRAY: _CatalogEntry("Empty collection for {name}", "[]", "graceful", "low", "input-validation"),
    K.LARGE_ARRAY: _CatalogEntry(
        "Memory stress test with large collection for {name}", "[0] * 100_000", "graceful", "medium", "performance"),
    K.NULL_INPUT: _CatalogEntry("None passed for {name}", "None", "graceful", "medium", "type-safety"),
    K.OMITTED_ARGUMENT: _CatalogEntry(
        "Argument {name} omitted so its default applies", "<omitted>", "graceful", "low", "type-safety"),
    K.EMPTY_STRING: _CatalogEntry("Empty string for {name}", '""', "graceful", "low", "input-validation"),
    K.LONG_STRING: _CatalogEntry(
        "Memory exhaustion test with very long string for {name}", '"a" * 1_000_000', "graceful", "high",
        "performance"),
    K.WHITESPACE_STRING: _CatalogEntry(
        "Whitespace-only string for {name}", '"   \\t\\n"', "graceful", "medium", "input-validation"),
    K.SPECIAL_CHARS: _CatalogEntry(
        "Unicode and control characters for {name}", '"\\u202e\\u0000\\U0001F680"', "graceful", "medium",
        "input-validation"),
    K.ZERO_NUMBER: _CatalogEntry("Zero value boundary test for {name}", "0", "graceful", "medium", "business-logic"),
    K.NEGATIVE_NUMBER: _CatalogEntry("Negative boundary test for {name}", "-1", "graceful", "medium", "business-logic"),
    K.BOUNDARY_NUMBER: _CatalogEntry("Value outside the checked range for {name}", "0", "error", "high",
                                     "input-validation"),
    K.NAN_INFINITY: _CatalogEntry("NaN and infinity values for {name}", "float('nan')", "error", "high", "type-safety"),
    K.PRECISION_LOSS: _CatalogEntry("Floating point precision for {name}", "0.1 + 0.2", "graceful", "medium",
                                    "type-safety"),
    K.TYPE_COERCION: _CatalogEntry("Value of the wrong type for {name}", '"1"', "error", "medium", "type-safety"),
    K.EMPTY_OBJECT: _CatalogEntry("Empty object for {name}", "{}", "graceful", "low", "input-validation"),
    K.CIRCULAR_REFERENCE: _CatalogEntry(
        "Circular reference object for {name}", "(lambda d: d.update(self=d) or d)({})", "error", "high",
        "type-safety"),
    K.DATE_INVALID: _CatalogEntry("Invalid date for {name}", '"2024-02-30"', "error", "high", "input-validation"),
    K.DATE_BOUNDARY: _CatalogEntry("Extreme date for {name}", "datetime.max", "graceful", "medium",
                                   "input-validation"),
    K.SQL_INJECTION: _CatalogEntry("SQL injection attempt for {name}", '"1; DROP TABLE users; --"', "security-block",
                                   "critical", "security"),
    K.XSS_PAYLOAD: _CatalogEntry("XSS injection payload for {name}", '"<img src=x onerror=alert(1)>"',
                                 "security-block", "critical", "security"),
    K.PATH_TRAVERSAL: _CatalogEntry("Path traversal attempt for {name}", '"../../etc/passwd"', "security-block",
                                    "critical", "security"),
    K.REGEX_DOS: _CatalogEntry("Catastrophic backtracking pattern for {name}", '"(a+)+$"', "timeout", "high",
                               "security"),
    K.BUFFER_OVERFLOW: _CatalogEntry("Oversized binary payload for {name}", 'b"\\x00" * 10_000_000', "error", "high",
                                     "performance"),
    K.ASYNC_TIMEOUT: _CatalogEntry("Awaited operation never completes", "asyncio.sleep(30)", "timeout", "high",
                                   "concurrency"),
    K.ASYNC_RACE_CONDITION: _CatalogEntry(
        "Concurrent tasks interleave on shared state", "asyncio.gather(call(), call())", "graceful", "high",
        "concurrency"),
    K.FUTURE_REJECTION: _CatalogEntry("Awaited collaborator raises", "AsyncMock(side_effect=Exception())", "error",
                                      "medium", "concurrency"),
    K.CONCURRENT_MODIFICATION: _CatalogEntry(
        "Collection modified during iteration", "items_mutated_during_iteration()", "error", "high", "concurrency"),
    K.DEADLOCK_SCENARIO: _CatalogEntry("Lock already held by another caller", "held_lock()", "timeout", "high",
                                       "concurrency"),
    K.MEMORY_EXHAUSTION: _CatalogEntry(
        "Memory exhaustion through large JSON", "json.dumps([[0] * 1000] * 1000)", "error", "high", "performance"),
    K.DUPLICATE_CREATION: _CatalogEntry("Attempt to create duplicate entity", "existing_entity()", "error", "medium",
                                        "business-logic"),
    K.CASCADE_DELETE: _CatalogEntry("Cascading delete with dependents", "entity_with_dependents_id()", "error", "high",
                                    "business-logic"),
}

PATH_NAME = re.compile(r"path|file|dir", re.IGNORECASE)
PATTERN_NAME = re.compile(r"pattern|regex", re.IGNORECASE)
FLOAT_TYPES = ("float", "Decimal")
MUTATING_CALLS = frozenset({"append", "extend", "insert", "pop", "remove", "clear", "add", "discard", "update"})


@dataclass(frozen=True)
class EdgeCaseInfo:
    kind: EdgeCaseKind
    parameter_name: str
    parameter_type: str
    description: str
    sample_value: str
    expected_behavior: ExpectedBehavior
    severity: EdgeSeverity
    category: EdgeCategory

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.kind.value,
            "parameter_name": self.parameter_name,
            "parameter_type": self.parameter_type,
            "description": self.description,
            "sample_value": self.sample_value,
            "expected_behavior": self.expected_behavior,
            "severity": self.severity,
            "category": self.category,
        }


def make_edge_case(
    kind: EdgeCaseKind,
    parameter_name: str,
    parameter_type: str,
    sample_value: str | None = None
) -> EdgeCaseInfo:
    entry = CATALOG[kind]
    return EdgeCaseInfo(
        kind=kind,
        parameter_name=parameter_name,
        parameter_type=parameter_type,
        description=entry.description.format(name=parameter_name),
        sample_value=sample_value if sample_value is not None else entry.sample_value,
        expected_behavior=entry.expected_behavior,
        severity=entry.severity,
        category=entry.category
    )


def detect_edge_cases(method: MethodInfo, policy: AnalysisPolicy = DEFAULT_POLICY) -> list[EdgeCaseInfo]:
    """All edge cases for a method: per parameter first, then method context and business cases."""

    cases: list[EdgeCaseInfo] = []

    for param in method.parameters:
        classification = classify_parameter(param, policy)
        constraints = maybe_constraints(param, method, policy)
        cases.extend(parameter_edge_cases(param, classification, constraints))

    cases.extend(_context_cases(method))
    cases.extend(_business_cases(method))
    return cases


def parameter_edge_cases(
    param: ParameterInfo,
    classification: TypeClassification,
    constraints: ParameterConstraints
) -> list[EdgeCaseInfo]:
    name = param.name.lstrip("*")
    type_text = classification.type_text
    kinds: list[EdgeCaseKind] = []

    if classification.is_array:
        kinds += [K.EMPTY_ARRAY, K.LARGE_ARRAY]
    if classification.is_string:
        kinds += [K.EMPTY_STRING, K.LONG_STRING, K.WHITESPACE_STRING, K.SPECIAL_CHARS,
                  K.XSS_PAYLOAD, K.SQL_INJECTION]
        if PATH_NAME.search(name):
            kinds.append(K.PATH_TRAVERSAL)
        if PATTERN_NAME.search(name):
            kinds.append(K.REGEX_DOS)
    if classification.is_number:
        kinds += [K.ZERO_NUMBER, K.NEGATIVE_NUMBER, K.NAN_INFINITY, K.TYPE_COERCION]
        if any(t in type_text for t in FLOAT_TYPES):
            kinds.append(K.PRECISION_LOSS)
    if classification.is_boolean and K.TYPE_COERCION not in kinds:
        kinds.append(K.TYPE_COERCION)
    if classification.is_date:
        kinds += [K.DATE_INVALID, K.DATE_BOUNDARY]
    elif classification.is_object:
        if "bytes" in type_text:
            kinds.append(K.BUFFER_OVERFLOW)
        else:
            kinds += [K.EMPTY_OBJECT, K.CIRCULAR_REFERENCE]
    if classification.is_nullable:
        kinds.append(K.NULL_INPUT)
    if param.has_default:
        kinds.append(K.OMITTED_ARGUMENT)

    cases = [make_edge_case(kind, name, type_text) for kind in kinds]

    if classification.is_number:
        if constraints.min_value is not None:
            cases.append(make_edge_case(K.BOUNDARY_NUMBER, name, type_text, repr(constraints.min_value - 1)))
        if constraints.max_value is not None:
            cases.append(make_edge_case(K.BOUNDARY_NUMBER, name, type_text, repr(constraints.max_value + 1)))

    return cases


def _context_cases(method: MethodInfo) -> list[EdgeCaseInfo]:
    cases = []
    source = method.source
    callees = {callee_name(call) for call in method.descendants(NodeKind.CALL)}

    if method.is_async or method.has(NodeKind.AWAIT):
        cases.append(make_edge_case(K.ASYNC_TIMEOUT, method.name, "Awaitable"))
        if method.has(NodeKind.AWAIT):
            cases.append(make_edge_case(K.FUTURE_REJECTION, method.name, "Awaitable"))
    if callees & {"gather", "create_task", "ensure_future"}:
        cases.append(make_edge_case(K.ASYNC_RACE_CONDITION, method.name, "Task"))
    if method.has(NodeKind.LOOP) and callees & MUTATING_CALLS:
        cases.append(make_edge_case(K.CONCURRENT_MODIFICATION, "collection", "list"))
    if "Lock(" in source or ".acquire(" in source:
        cases.append(make_edge_case(K.DEADLOCK_SCENARIO, "lock", "Lock"))
    if "json.loads" in source or "json.dumps" in source:
        cases.append(make_edge_case(K.MEMORY_EXHAUSTION, "data", "object"))

    return cases


def _business_cases(method: MethodInfo) -> list[EdgeCaseInfo]:
    cases = []
    lowered = method.name.lower()
    if "create" in lowered:
        cases.append(make_edge_case(K.DUPLICATE_CREATION, "entity", "object"))
    if "delete" in lowered:
        cases.append(make_edge_case(K.CASCADE_DELETE, "id", "str"))
    return cases

