"""
Type Classifier - Lexical classification of parameter annotations.

Classifies annotation text (as produced by the parser) into the broad
categories the generators key their catalogs on: array, string, number,
boolean, object and nullable. Unions are split on ``|`` and
``Union[...]`` / ``Optional[...]`` are unwrapped; every arm is
classified and the flags are OR-ed together.

No semantic inference happens here. An annotation that cannot be
classified (missing, ``Any``) falls back to ``object`` and logs a
warning instead of raising.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .models import ParameterInfo

if TYPE_CHECKING:
    from .policy import AnalysisPolicy

logger = logging.getLogger(__name__)

# Base names (text before "[") per category
ARRAY_TYPES = frozenset({
    "list", "List", "tuple", "Tuple", "set", "Set", "frozenset", "FrozenSet",
    "Sequence", "MutableSequence", "Iterable", "Iterator", "Collection",
    "AbstractSet", "MutableSet", "deque", "Deque",
})
STRING_TYPES = frozenset({"str", "string", "LiteralString", "AnyStr"})
NUMBER_TYPES = frozenset({"int", "float", "complex", "Decimal", "Fraction", "Number", "Real", "Integral"})
BOOLEAN_TYPES = frozenset({"bool"})
NULLABLE_TYPES = frozenset({"None", "NoneType"})
OBJECT_TYPES = frozenset({
    "dict", "Dict", "Mapping", "MutableMapping", "TypedDict", "object",
    "defaultdict", "OrderedDict", "Counter", "ChainMap",
})
DATE_TYPES = frozenset({"date", "datetime"})
UNKNOWN_TYPES = frozenset({"Any", "unknown"})

# Module prefixes dropped before matching
_PREFIXES = ("typing.", "typing_extensions.", "collections.abc.", "collections.", "datetime.",
             "decimal.", "fractions.", "numbers.")

_QUOTED = re.compile(r"""^(['"]).*\1$""")
_NUMERIC_LITERAL = re.compile(r"^-?\d+(\.\d+)?$")

CATEGORIES = ("array", "string", "number", "boolean", "object", "nullable")


@dataclass(frozen=True)
class TypeClassification:
    """Result of classifying one annotation."""
    type_text: str
    is_array: bool = False
    is_string: bool = False
    is_number: bool = False
    is_boolean: bool = False
    is_object: bool = False
    is_nullable: bool = False
    is_date: bool = False
    fallback: bool = False

    @property
    def primary(self) -> str:
        """Most specific category (nullable only when nothing else applies)."""
        for category in CATEGORIES[:-1]:
            if getattr(self, f"is_{category}"):
                return category
        return "nullable" if self.is_nullable else "object"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type_text,
            "category": self.primary,
            "nullable": self.is_nullable,
            "fallback": self.fallback,
        }


def classify(type_text: str | None) -> TypeClassification:
    """
    Classify annotation text.

    Args:
        type_text: Annotation as source text (None when absent)

    Returns:
        TypeClassification; never raises
    """
    text = (type_text or "").strip()
    if not text:
        logger.warning("Missing type annotation; classifying as object")
        return TypeClassification(type_text="Any", is_object=True, fallback=True)

    flags = {category: False for category in CATEGORIES}
    is_date = False
    unknown_arms = 0

    arms = split_union(text)
    for arm in arms:
        category = _classify_arm(arm)
        if category == "date":
            is_date = True
            flags["object"] = True
        elif category == "unknown":
            unknown_arms += 1
        else:
            flags[category] = True

    fallback = unknown_arms == len(arms)
    if fallback:
        logger.warning(f"Cannot classify type '{text}'; classifying as object")
        flags["object"] = True

    return TypeClassification(
        type_text=text,
        is_array=flags["array"],
        is_string=flags["string"],
        is_number=flags["number"],
        is_boolean=flags["boolean"],
        is_object=flags["object"],
        is_nullable=flags["nullable"],
        is_date=is_date,
        fallback=fallback,
    )


def classify_parameter(param: ParameterInfo, policy: AnalysisPolicy | None = None) -> TypeClassification:
    """
    Classify a parameter through the policy's classify_type (plain classify() without one).

    ``*args``/``**kwargs`` are a tuple/dict. A parameter that may be omitted
    or may be None is nullable.
    """
    classify_type = policy.classify_type if policy is not None else classify

    if param.kind == "var_positional":
        return classify_type("tuple")
    if param.kind == "var_keyword":
        return classify_type("dict")

    classification = classify_type(param.type_hint)
    if param.is_optional and not classification.is_nullable:
        return replace(classification, is_nullable=True)
    return classification


def split_union(text: str) -> list[str]:
    """
    Split annotation text into union arms.

    ``int | None`` -> ``["int", "None"]``
    ``Optional[str]`` -> ``["str", "None"]``
    ``Union[int, list[str]]`` -> ``["int", "list[str]"]``
    """
    arms = []
    for part in _split_top_level(text, "|"):
        base, inner = _split_generic(_strip_prefix(part))
        if base == "Optional" and inner is not None:
            arms.extend(split_union(inner))
            arms.append("None")
        elif base == "Union" and inner is not None:
            for member in _split_top_level(inner, ","):
                arms.extend(split_union(member))
        else:
            arms.append(part)
    return arms


def _classify_arm(arm: str) -> str:
    """Classify one union arm; returns a category, "date" or "unknown"."""
    arm = _strip_prefix(arm)

    if _QUOTED.match(arm):
        # Forward references like "UserRepository" name classes
        inner = arm[1:-1]
        return _classify_arm(inner) if inner and inner[0].isupper() else "string"
    if _NUMERIC_LITERAL.match(arm):
        return "number"

    base, inner = _split_generic(arm)

    if base == "Literal" and inner:
        first = _split_top_level(inner, ",")[0]
        return "string" if _QUOTED.match(first) else _classify_arm(first)
    if base in ("Annotated", "Final", "ClassVar") and inner:
        return _classify_arm(_split_top_level(inner, ",")[0])
    if base in ARRAY_TYPES or arm.endswith("[]"):
        return "array"
    if base in STRING_TYPES:
        return "string"
    if base in NUMBER_TYPES:
        return "number"
    if base in BOOLEAN_TYPES:
        return "boolean"
    if base in NULLABLE_TYPES:
        return "nullable"
    if base in DATE_TYPES:
        return "date"
    if base in UNKNOWN_TYPES:
        return "unknown"
    if base in OBJECT_TYPES:
        return "object"
    # Any other class name is an object
    if base and (base[0].isalpha() or base[0] == "_"):
        return "object"
    return "unknown"


def _strip_prefix(text: str) -> str:
    text = text.strip()
    for prefix in _PREFIXES:
        if text.startswith(prefix):
            return text[len(prefix):]
    return text


def _split_generic(text: str) -> tuple[str, str | None]:
    """``list[int]`` -> ``("list", "int")``; ``int`` -> ``("int", None)``."""
    text = text.strip()
    if "[" in text and text.endswith("]"):
        index = text.index("[")
        return text[:index].strip(), text[index + 1:-1]
    return text, None


def _split_top_level(text: str, separator: str) -> list[str]:
    """Split on a separator that is not nested inside brackets."""
    parts = []
    depth = 0
    current = []
    for char in text:
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        if char == separator and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return [p for p in parts if p]
