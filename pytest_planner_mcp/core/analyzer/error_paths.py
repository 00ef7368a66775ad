"""Enumerate the ways a method can fail: raises, error guards, try blocks and rejected futures."""

import ast
import re
from dataclasses import dataclass

from .models import NODE_TYPES, ErrorPath, MethodInfo, NodeKind
from .policy import DEFAULT_POLICY, AnalysisPolicy

DEFAULT_ERROR_TYPE = "Exception"

# Message keywords -> condition label, checked in order
MESSAGE_CONDITIONS = [
    (("required", "missing"), "missing required parameter"),
    (("invalid", "bad"), "invalid input provided"),
    (("not found", "does not exist"), "entity not found"),
    (("unauthorized", "permission"), "unauthorized access"),
    (("duplicate", "already exists"), "duplicate entity"),
    (("validation",), "validation error"),
    (("positive", "negative"), "value validation error"),
    (("format", "email"), "format validation error"),
]

# Error-type keywords -> condition label
TYPE_CONDITIONS = [
    ("validation", "validation failure"),
    ("notfound", "resource not found"),
    ("unauthorized", "access denied"),
    ("conflict", "resource conflict"),
]

# Guard expressions that look like input/state checks
ERROR_CONDITION_PATTERNS = [
    # None / falsy checks
    re.compile(r"^not\s+\S"),
    re.compile(r"\bis\s+None\b"),
    re.compile(r"[=!]=\s*None\b"),
    # Length / emptiness
    re.compile(r"\blen\(.*\)\s*==\s*0"),
    re.compile(r"\blen\(.*\)\s*<\s*1"),
    re.compile(r"==\s*False\b"),
    re.compile(r"==\s*(''|\"\")"),
    re.compile(r"==\s*0\b"),
    # Validation helpers
    re.compile(r"\.is_empty\(\)"),
    re.compile(r"\.is_valid\(\)\s*==\s*False"),
    re.compile(r"\.has_errors?\b"),
    re.compile(r"\.is_invalid\b"),
    # Type checks
    re.compile(r"\bnot\s+isinstance\("),
]

ERROR_CONDITION_KEYWORDS = ("invalid", "error", "fail", "missing", "empty", "none")

REJECTION_CALLS = frozenset({"set_exception", "reject"})


@dataclass(frozen=True)
class RaisedError:
    """Label and literal message of a raise statement."""
    error_type: str
    message: str | None = None


def analyze_error_paths(method: MethodInfo, policy: AnalysisPolicy = DEFAULT_POLICY) -> list[ErrorPath]:
    """Run the four error passes over a method, concatenated in pass order."""

    error_paths: list[ErrorPath] = []
    error_paths.extend(_raise_paths(method, policy))
    error_paths.extend(_guard_paths(method, policy))
    error_paths.extend(_try_paths(method))
    if method.is_async:
        error_paths.extend(_rejection_paths(method))
    return error_paths


def is_error_condition(condition: str) -> bool:
    """True if a guard expression looks like an error check."""
    clean = " ".join(condition.split())
    if any(pattern.search(clean) for pattern in ERROR_CONDITION_PATTERNS):
        return True
    lowered = clean.lower()
    return any(keyword in lowered for keyword in ERROR_CONDITION_KEYWORDS)


def parse_raise(node: ast.Raise) -> RaisedError | None:
    """Parse a raise statement (None for a bare re-raise)."""
    if node.exc is None:
        return None

    error_type = DEFAULT_ERROR_TYPE
    message = None

    # raise ValueError("message") / raise errors.NotFound("message")
    if isinstance(node.exc, ast.Call):
        if isinstance(node.exc.func, ast.Name):
            error_type = node.exc.func.id
        elif isinstance(node.exc.func, ast.Attribute):
            error_type = node.exc.func.attr

        if node.exc.args:
            first_arg = node.exc.args[0]
            if isinstance(first_arg, ast.Constant) and isinstance(first_arg.value, str):
                message = first_arg.value

    # raise ValueError
    elif isinstance(node.exc, ast.Name):
        error_type = node.exc.id
    elif isinstance(node.exc, ast.Attribute):
        error_type = node.exc.attr

    return RaisedError(error_type=error_type, message=message)


# =============================================================================
# Passes
# =============================================================================

def _raise_paths(method: MethodInfo, policy: AnalysisPolicy) -> list[ErrorPath]:
    paths = []

    for index, node in enumerate(method.descendants(NodeKind.RAISE)):
        raised = parse_raise(node)
        if raised is None:
            continue

        classification = policy.classify_error(raised.error_type, raised.message)
        paths.append(ErrorPath(
            condition=_raise_condition(method, node, raised, index),
            error_type=raised.error_type,
            error_message=raised.message,
            category=classification.category,
            severity=classification.severity,
            recoverable=classification.recoverable,
            nested_level=method.nesting_level(node)
        ))

    return paths


def _guard_paths(method: MethodInfo, policy: AnalysisPolicy) -> list[ErrorPath]:
    paths = []

    for node in method.descendants(NodeKind.CONDITIONAL):
        # Guards that raise are reported by the raise pass
        if _body_raises(node):
            continue

        condition = ast.unparse(node.test)
        if not is_error_condition(condition):
            continue

        classification = policy.classify_guard(condition)
        paths.append(ErrorPath(
            condition=condition,
            error_type=_infer_guard_error_type(condition),
            category=classification.category,
            severity=classification.severity,
            recoverable=classification.recoverable,
            nested_level=method.nesting_level(node)
        ))

    return paths


def _try_paths(method: MethodInfo) -> list[ErrorPath]:
    paths = []

    for node in method.descendants(NodeKind.TRY):
        if not node.handlers:
            continue
        nested_level = method.nesting_level(node)
        paths.append(ErrorPath(
            condition="try-except block",
            error_type=_handled_type(node),
            category="system",
            severity="high" if nested_level > 1 else "medium",
            recoverable=bool(node.finalbody),
            nested_level=nested_level
        ))

    return paths


def _rejection_paths(method: MethodInfo) -> list[ErrorPath]:
    for call in method.descendants(NodeKind.CALL):
        if callee_name(call) in REJECTION_CALLS:
            return [ErrorPath(
                condition="future rejection",
                error_type="FutureRejection",
                category="system",
                severity="medium",
                recoverable=True
            )]
    return []


# =============================================================================
# Helpers
# =============================================================================

def _raise_condition(method: MethodInfo, node: ast.Raise, raised: RaisedError, index: int) -> str:
    """Most specific condition label for a raise statement."""
    if raised.message:
        message = raised.message.lower()
        for keywords, label in MESSAGE_CONDITIONS:
            if any(keyword in message for keyword in keywords):
                return label

    error_type = raised.error_type.lower()
    for keyword, label in TYPE_CONDITIONS:
        if keyword in error_type:
            return label

    context = _parent_context(method, node)
    if context:
        return context

    suffix = f" ({index + 1})" if index > 0 else ""
    return f"explicit raise{suffix}"


def _parent_context(method: MethodInfo, node: ast.AST) -> str | None:
    """Describe the nearest enclosing guard or except clause."""
    for parent in method.enclosing(node):
        if isinstance(parent, ast.If):
            condition = ast.unparse(parent.test)
            if condition.startswith("not ") or "None" in condition:
                return "null check failed"
            if "len(" in condition and "0" in condition:
                return "empty collection"
            if "==" in condition or "!=" in condition:
                return "equality check failed"
            return f"condition check: {condition[:30]}..."
        if isinstance(parent, ast.ExceptHandler):
            return "exception caught"
    return None


def _body_raises(node: ast.If) -> bool:
    raise_types = NODE_TYPES[NodeKind.RAISE]
    return any(isinstance(child, raise_types) for stmt in node.body for child in ast.walk(stmt))


def _infer_guard_error_type(condition: str) -> str:
    lowered = condition.lower()
    if "none" in lowered:
        return "NullReferenceError"
    return "ValidationError"


def _handled_type(node: ast.Try) -> str:
    """Exception name of the first except clause (CaughtException for a bare except)."""
    handler = node.handlers[0]
    if handler.type is None:
        return "CaughtException"
    return ast.unparse(handler.type)


def callee_name(call: ast.Call) -> str | None:
    if isinstance(call.func, ast.Name):
        return call.func.id
    if isinstance(call.func, ast.Attribute):
        return call.func.attr
    return None
