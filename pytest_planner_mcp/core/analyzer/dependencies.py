"""
Dependency Analyzer - Constructor-declared collaborators and their usage.

A collaborator is a constructor parameter. Its uses are the
``self.<attr>.<member>(...)`` calls in each method, where ``<attr>`` is
the attribute the constructor stored the parameter in.
"""

import ast
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Literal

from ...constants import FAKE_CALL_THRESHOLD
from .models import ClassModel, MethodInfo, NodeKind

MockStrategy = Literal["stub", "spy", "fake", "real"]

# Declared-type fallbacks from the parameter name, checked in order
_NAME_TYPE_HINTS = [
    (("repository", "repo"), "Repository"),
    (("service",), "Service"),
    (("logger",), "Logger"),
]


@dataclass(frozen=True)
class DependencyUsage:
    """How one method uses one collaborator."""
    method_name: str
    calls: tuple[str, ...]
    is_conditional: bool = False
    error_handling: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "method_name": self.method_name,
            "calls": list(self.calls),
            "is_conditional": self.is_conditional,
            "error_handling": self.error_handling,
        }


@dataclass(frozen=True)
class DependencyModel:
    """A collaborator, its usage across methods and how to simulate it."""
    name: str
    type: str
    usage: tuple[DependencyUsage, ...] = ()
    mock_strategy: MockStrategy = "stub"
    common_methods: tuple[str, ...] = ()
    attributes: tuple[str, ...] = field(default=(), compare=False)

    @property
    def total_calls(self) -> int:
        return sum(len(u.calls) for u in self.usage)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": self.type,
            "usage": [u.to_dict() for u in self.usage],
            "mock_strategy": self.mock_strategy,
            "common_methods": list(self.common_methods),
        }


def analyze_dependencies(cls: ClassModel) -> list[DependencyModel]:
    """Build a DependencyModel for every constructor parameter, in declaration order."""

    dependencies = []

    for param in cls.constructor_params:
        attributes = tuple(cls.attributes_for(param.name))
        usage = _analyze_usage(cls, attributes)
        declared_type = param.type_hint or _type_from_name(param.name)

        dependencies.append(DependencyModel(
            name=param.name,
            type=declared_type,
            usage=tuple(usage),
            mock_strategy=choose_mock_strategy(declared_type, usage),
            common_methods=tuple(_common_methods(usage)),
            attributes=attributes
        ))

    return dependencies


def choose_mock_strategy(declared_type: str, usage: list[DependencyUsage]) -> MockStrategy:
    """
    Pick how tests should simulate a collaborator.

    Rules, first match wins:
    1. type mentions "repository" -> stub
    2. type mentions "service" and some use is guarded or error-handled -> spy
    3. more than FAKE_CALL_THRESHOLD member calls overall -> fake
    4. stub
    """
    lowered = declared_type.lower()
    total_calls = sum(len(u.calls) for u in usage)
    complex_interaction = any(u.is_conditional or u.error_handling for u in usage)

    if "repository" in lowered:
        return "stub"
    if "service" in lowered and complex_interaction:
        return "spy"
    if total_calls > FAKE_CALL_THRESHOLD:
        return "fake"
    return "stub"


def dependencies_used(method: MethodInfo, dependencies: list[DependencyModel]) -> list[str]:
    """Names of collaborators a method references at all."""
    return [
        dep.name for dep in dependencies
        if _references(method.source, dep.attributes)
    ]


def _analyze_usage(cls: ClassModel, attributes: tuple[str, ...]) -> list[DependencyUsage]:
    usage = []

    for method in cls.methods:
        calls = _member_calls(method, attributes)
        if not calls:
            continue
        usage.append(DependencyUsage(
            method_name=method.name,
            calls=tuple(calls),
            is_conditional=_is_conditional(method, attributes),
            error_handling=_has_error_handling(method, attributes)
        ))

    return usage


def _member_calls(method: MethodInfo, attributes: tuple[str, ...]) -> list[str]:
    """Unique ``self.<attr>.<member>(...)`` member names, in first-call order."""
    calls: list[str] = []

    for call in method.descendants(NodeKind.CALL):
        func = call.func
        if not isinstance(func, ast.Attribute):
            continue
        owner = func.value
        if (
            isinstance(owner, ast.Attribute)
            and isinstance(owner.value, ast.Name)
            and owner.value.id == "self"
            and owner.attr in attributes
            and func.attr not in calls
        ):
            calls.append(func.attr)

    return calls


def _is_conditional(method: MethodInfo, attributes: tuple[str, ...]) -> bool:
    """True if any guard expression references the collaborator."""
    for node in method.nodes:
        if isinstance(node, (ast.If, ast.While, ast.IfExp)):
            guard = node.test
        elif isinstance(node, ast.Match):
            guard = node.subject
        else:
            continue
        if _references(ast.unparse(guard), attributes):
            return True
    return False


def _has_error_handling(method: MethodInfo, attributes: tuple[str, ...]) -> bool:
    """True if a try block or raise statement references the collaborator."""
    candidates = method.descendants(NodeKind.TRY) + method.descendants(NodeKind.RAISE)
    return any(_references(ast.unparse(node), attributes) for node in candidates)


def _common_methods(usage: list[DependencyUsage]) -> list[str]:
    frequency = Counter(call for u in usage for call in u.calls)
    return [call for call, count in frequency.items() if count > 1]


def _references(text: str, attributes: tuple[str, ...]) -> bool:
    return any(re.search(rf"\bself\.{re.escape(attr)}\b", text) for attr in attributes)


def _type_from_name(param_name: str) -> str:
    lowered = param_name.lower()
    for keywords, type_name in _NAME_TYPE_HINTS:
        if any(keyword in lowered for keyword in keywords):
            return type_name
    return "unknown"
