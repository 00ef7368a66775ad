"""Concurrency Analyzer - Await chains, async patterns, shared resources and race candidates."""

import ast
from dataclasses import dataclass
from typing import Literal

from .error_paths import REJECTION_CALLS, callee_name
from .models import ClassModel, MethodInfo, NodeKind

RiskLevel = Literal["low", "medium", "high"]
ResourceKind = Literal["database", "file", "memory", "network"]
AsyncPatternKind = Literal["fire-and-forget", "parallel-execution", "sequential-chain", "timeout-retry"]

SEQUENTIAL_CHAIN_MIN_AWAITS = 3

# (pattern, callee names, risk)
ASYNC_PATTERN_CALLS: list[tuple[AsyncPatternKind, frozenset[str], RiskLevel]] = [
    ("fire-and-forget", frozenset({"create_task", "ensure_future", "run_coroutine_threadsafe"}), "medium"),
    ("parallel-execution", frozenset({"gather", "wait", "as_completed", "TaskGroup"}), "medium"),
    ("timeout-retry", frozenset({"sleep", "wait_for", "timeout", "retry"}), "high"),
]

# (resource name, kind, keywords in class source, access patterns, needs synchronization)
SHARED_RESOURCE_KEYWORDS = [
    ("database", "database", ("repository", "session.", "cursor", "transaction"), ("read", "write", "transaction"), True),
    ("filesystem", "file", ("open(", "pathlib", "file"), ("read", "write"), True),
    ("network", "network", ("http", "fetch", "requests.", "urlopen"), ("request", "response"), False),
    ("cache", "memory", ("cache",), ("get", "set", "delete"), True),
]

WRITE_KEYWORDS = ("create", "update", "delete", "insert", "save", "write", "remove")


@dataclass(frozen=True)
class AwaitChainInfo:
    method_name: str
    depth: int
    has_error_handling: bool
    has_finally: bool
    can_reject: bool
    operations: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "method_name": self.method_name,
            "depth": self.depth,
            "has_error_handling": self.has_error_handling,
            "has_finally": self.has_finally,
            "can_reject": self.can_reject,
            "operations": list(self.operations),
        }


@dataclass(frozen=True)
class RaceConditionInfo:
    type: Literal["read-write", "write-write", "resource-access"]
    resources: tuple[str, ...]
    methods: tuple[str, ...]
    likelihood: RiskLevel

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type,
            "resources": list(self.resources),
            "methods": list(self.methods),
            "likelihood": self.likelihood,
        }


@dataclass(frozen=True)
class SharedResourceInfo:
    name: str
    type: ResourceKind
    access_patterns: tuple[str, ...]
    needs_synchronization: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": self.type,
            "access_patterns": list(self.access_patterns),
            "needs_synchronization": self.needs_synchronization,
        }


@dataclass(frozen=True)
class AsyncPatternInfo:
    pattern: AsyncPatternKind
    methods: tuple[str, ...]
    risk_level: RiskLevel

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "pattern": self.pattern,
            "methods": list(self.methods),
            "risk_level": self.risk_level,
        }


@dataclass(frozen=True)
class ConcurrencyAnalysis:
    has_async_operations: bool
    await_chains: tuple[AwaitChainInfo, ...] = ()
    race_conditions: tuple[RaceConditionInfo, ...] = ()
    shared_resources: tuple[SharedResourceInfo, ...] = ()
    async_patterns: tuple[AsyncPatternInfo, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "has_async_operations": self.has_async_operations,
            "await_chains": [c.to_dict() for c in self.await_chains],
            "race_conditions": [r.to_dict() for r in self.race_conditions],
            "shared_resources": [r.to_dict() for r in self.shared_resources],
            "async_patterns": [p.to_dict() for p in self.async_patterns],
        }


def analyze_concurrency(cls: ClassModel) -> ConcurrencyAnalysis:
    """Analyze the async behaviour of a class."""

    methods = list(cls.methods)

    return ConcurrencyAnalysis(
        has_async_operations=any(m.is_async or m.has(NodeKind.AWAIT) for m in methods),
        await_chains=tuple(_await_chain(m) for m in methods if m.is_async),
        race_conditions=tuple(_race_conditions(cls)),
        shared_resources=tuple(_shared_resources(cls.source)),
        async_patterns=tuple(p for m in methods for p in _async_patterns(m)),
    )


def _await_chain(method: MethodInfo) -> AwaitChainInfo:
    awaits = method.descendants(NodeKind.AWAIT)
    tries = method.descendants(NodeKind.TRY)
    can_reject = method.has(NodeKind.RAISE) or any(
        callee_name(call) in REJECTION_CALLS for call in method.descendants(NodeKind.CALL)
    )

    return AwaitChainInfo(
        method_name=method.name,
        depth=len(awaits),
        has_error_handling=bool(tries),
        has_finally=any(t.finalbody for t in tries),
        can_reject=can_reject,
        operations=tuple(_operation_text(a.value) for a in awaits)
    )


def _async_patterns(method: MethodInfo) -> list[AsyncPatternInfo]:
    callees = {callee_name(call) for call in method.descendants(NodeKind.CALL)}
    patterns = [
        AsyncPatternInfo(pattern, (method.name,), risk)
        for pattern, names, risk in ASYNC_PATTERN_CALLS
        if callees & names
    ]

    if len(method.descendants(NodeKind.AWAIT)) > SEQUENTIAL_CHAIN_MIN_AWAITS:
        patterns.append(AsyncPatternInfo("sequential-chain", (method.name,), "low"))

    return patterns


def _shared_resources(class_source: str) -> list[SharedResourceInfo]:
    lowered = class_source.lower()
    return [
        SharedResourceInfo(name, kind, access, sync)
        for name, kind, keywords, access, sync in SHARED_RESOURCE_KEYWORDS
        if any(keyword in lowered for keyword in keywords)
    ]


def _race_conditions(cls: ClassModel) -> list[RaceConditionInfo]:
    """Collaborator attributes touched by more than one method, at least one of them writing."""
    collaborators = set(cls.attribute_map)
    access: dict[str, list[MethodInfo]] = {}

    for method in cls.methods:
        touched = {
            node.attr for node in method.nodes
            if isinstance(node, ast.Attribute)
            and isinstance(node.value, ast.Name)
            and node.value.id == "self"
            and node.attr in collaborators
        }
        for attr in sorted(touched):
            access.setdefault(attr, []).append(method)

    races = []
    for attr, methods in access.items():
        if len(methods) > 1 and any(_is_write(m) for m in methods):
            races.append(RaceConditionInfo(
                type="read-write",
                resources=(f"self.{attr}",),
                methods=tuple(m.name for m in methods),
                likelihood="high" if len(methods) > 2 else "medium"
            ))
    return races


def _is_write(method: MethodInfo) -> bool:
    text = method.source.lower()
    return any(keyword in text for keyword in WRITE_KEYWORDS)


def _operation_text(node: ast.expr) -> str:
    if isinstance(node, ast.Call):
        return ast.unparse(node.func)
    return ast.unparse(node)

