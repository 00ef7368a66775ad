"""Data models for parsed classes and the analysis results built from them."""

import ast
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from ..errors import AnalysisInvariantError

# Parameter kinds matching Python's inspect module
ParameterKind = Literal[
    "positional_only",      # Before /
    "positional_or_keyword", # Normal parameters
    "var_positional",       # *args
    "keyword_only",         # After * or *args
    "var_keyword"           # **kwargs
]

Visibility = Literal["public", "protected", "private", "special"]


class NodeKind(str, Enum):
    """Control-flow node kinds the analysis passes ask for."""
    CONDITIONAL = "conditional"
    LOOP = "loop"
    SWITCH = "switch"
    TRY = "try"
    RAISE = "raise"
    AWAIT = "await"
    CALL = "call"


_TRY_NODES: tuple[type, ...] = (ast.Try,) + ((ast.TryStar,) if hasattr(ast, "TryStar") else ())

NODE_TYPES: dict[NodeKind, tuple[type, ...]] = {
    NodeKind.CONDITIONAL: (ast.If,),
    NodeKind.LOOP: (ast.For, ast.AsyncFor, ast.While),
    NodeKind.SWITCH: (ast.Match,),
    NodeKind.TRY: _TRY_NODES,
    NodeKind.RAISE: (ast.Raise,),
    NodeKind.AWAIT: (ast.Await,),
    NodeKind.CALL: (ast.Call,),
}

# Constructs that count towards a node's nesting level
NESTING_NODES: tuple[type, ...] = (
    NODE_TYPES[NodeKind.CONDITIONAL]
    + NODE_TYPES[NodeKind.LOOP]
    + NODE_TYPES[NodeKind.SWITCH]
    + NODE_TYPES[NodeKind.TRY]
)


@dataclass(frozen=True)
class ParameterInfo:
    """Information about a function parameter."""
    name: str
    type_hint: str | None = None
    default_value: str | None = None
    has_default: bool = False
    kind: ParameterKind = "positional_or_keyword"

    @property
    def is_optional(self) -> bool:
        """True when the argument may be omitted or may be None."""
        if self.has_default:
            return True
        if not self.type_hint:
            return False
        hint = self.type_hint.replace("typing.", "")
        return hint.startswith("Optional[") or "None" in hint.replace(" ", "").split("|")


@dataclass(frozen=True)
class MethodInfo:
    """A method of an analyzed class.

    Besides the signature, the model keeps a bounded snapshot of the
    method body: every descendant node in source order (bodies of nested
    functions and classes are not entered) and a parent index so passes
    can walk outwards to the method boundary.
    """
    name: str
    parameters: tuple[ParameterInfo, ...] = ()
    return_type: str | None = None
    docstring: str | None = None
    is_async: bool = False
    is_static: bool = False
    is_classmethod: bool = False
    decorators: tuple[str, ...] = ()
    line_number: int = 0
    source: str = ""
    truncated: bool = False
    node: ast.AST | None = field(default=None, compare=False, repr=False)
    nodes: tuple[ast.AST, ...] = field(default=(), compare=False, repr=False)
    parents: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def visibility(self) -> Visibility:
        if self.name.startswith("__") and self.name.endswith("__"):
            return "special"
        if self.name.startswith("__"):
            return "private"
        if self.name.startswith("_"):
            return "protected"
        return "public"

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"

    def descendants(self, kind: NodeKind) -> list[ast.AST]:
        """All body nodes of the given kind, in source order."""
        node_types = NODE_TYPES[kind]
        return [n for n in self.nodes if isinstance(n, node_types)]

    def has(self, kind: NodeKind) -> bool:
        node_types = NODE_TYPES[kind]
        return any(isinstance(n, node_types) for n in self.nodes)

    def count(self, *kinds: NodeKind) -> int:
        return sum(len(self.descendants(kind)) for kind in kinds)

    def enclosing(self, node: ast.AST) -> Iterator[ast.AST]:
        """Yield the ancestors of ``node`` up to (not including) the method."""
        current = self.parents.get(node)
        while current is not None and current is not self.node:
            yield current
            current = self.parents.get(current)

    def nesting_level(self, node: ast.AST) -> int:
        """Number of enclosing conditional/loop/switch/try constructs."""
        return sum(1 for parent in self.enclosing(node) if isinstance(parent, NESTING_NODES))


@dataclass(frozen=True)
class ClassModel:
    """Immutable snapshot of one parsed class."""
    name: str
    methods: tuple[MethodInfo, ...] = ()
    constructor: MethodInfo | None = None
    constructor_params: tuple[ParameterInfo, ...] = ()
    attribute_map: dict[str, str] = field(default_factory=dict, compare=False)
    base_classes: tuple[str, ...] = ()
    decorators: tuple[str, ...] = ()
    docstring: str | None = None
    line_number: int = 0
    source: str = ""

    @property
    def method_names(self) -> list[str]:
        return [m.name for m in self.methods]

    def get_method(self, name: str) -> MethodInfo | None:
        for method in self.methods:
            if method.name == name:
                return method
        return None

    def attributes_for(self, param_name: str) -> list[str]:
        """Self-attribute names that hold the given constructor parameter."""
        attrs = [attr for attr, param in self.attribute_map.items() if param == param_name]
        return attrs or [param_name]


# =============================================================================
# Analysis results
# =============================================================================

Severity = Literal["low", "medium", "high", "critical"]
ErrorCategory = Literal["validation", "business-logic", "system", "security"]
SideEffectKind = Literal["database", "network", "notification", "logging"]


@dataclass(frozen=True)
class SideEffect:
    """An observable effect of a method that a test may need to isolate."""
    kind: SideEffectKind
    description: str
    needs_mocking: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.kind,
            "description": self.description,
            "needs_mocking": self.needs_mocking,
        }


@dataclass(frozen=True)
class ErrorPath:
    """
    One way a method can signal failure.

    Security errors are always critical and never recoverable; building
    one that is not raises AnalysisInvariantError.
    """
    condition: str
    error_type: str
    category: ErrorCategory
    severity: Severity
    recoverable: bool
    nested_level: int = 0
    error_message: str | None = None
    is_expected: bool = True
    propagates_to: tuple[str, ...] = ("caller",)

    def __post_init__(self):
        if self.category == "security" and (self.severity != "critical" or self.recoverable):
            raise AnalysisInvariantError(
                f"Security error path '{self.condition}' must be critical and non-recoverable "
                f"(got severity={self.severity}, recoverable={self.recoverable})"
            )
        if self.nested_level < 0:
            raise AnalysisInvariantError(f"Negative nesting level for '{self.condition}'")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "condition": self.condition,
            "error_type": self.error_type,
            "is_expected": self.is_expected,
            "severity": self.severity,
            "category": self.category,
            "recoverable": self.recoverable,
            "nested_level": self.nested_level,
            "propagates_to": list(self.propagates_to),
        }
        if self.error_message is not None:
            result["error_message"] = self.error_message
        return result
