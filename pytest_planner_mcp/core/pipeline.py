"""
Class Analysis Pipeline - Main entry point that runs every pass over one class.

Flow:
    source -> parse -> pick class -> dependencies -> method flows (+ error paths)
           -> business patterns -> scenarios
           -> per method: edge cases, boundary values, property tests
           -> concurrency

Input errors (syntax, unknown class, unknown method) raise and no partial
bundle is returned. Classification problems degrade to a documented
default and are listed in ``warnings``.
"""

import logging
from dataclasses import dataclass, field
from typing import Literal

from ..constants import MAX_NODES_PER_METHOD
from .analyzer.concurrency import ConcurrencyAnalysis, analyze_concurrency
from .analyzer.dependencies import DependencyModel, analyze_dependencies
from .analyzer.method_flow import MethodFlowAnalysis, analyze_method_flow, analyze_method_flows
from .analyzer.models import ClassModel
from .analyzer.parser import extract_classes, find_class, parse_module
from .analyzer.patterns import BusinessLogicPattern, detect_patterns
from .analyzer.policy import DEFAULT_POLICY, AnalysisPolicy
from .errors import MethodNotFoundError
from .generators.extractors.boundary_values import BoundaryAnalysis, generate_boundary_analysis
from .generators.extractors.edge_cases import EdgeCaseInfo, detect_edge_cases
from .generators.property_based import PropertyBasedTestCase, generate_property_tests
from .generators.scenarios import TestScenario, generate_test_scenarios

logger = logging.getLogger(__name__)

ComponentType = Literal["service", "repository", "controller", "model", "utility", "unit"]

# Class name suffix -> component type
COMPONENT_SUFFIXES: list[tuple[str, ComponentType]] = [
    ("repository", "repository"),
    ("repo", "repository"),
    ("dao", "repository"),
    ("controller", "controller"),
    ("view", "controller"),
    ("handler", "controller"),
    ("service", "service"),
    ("manager", "service"),
    ("client", "service"),
    ("model", "model"),
    ("entity", "model"),
    ("schema", "model"),
    ("utils", "utility"),
    ("util", "utility"),
    ("helpers", "utility"),
    ("helper", "utility"),
]
# Name fragments checked anywhere in the name when no suffix matches
COMPONENT_KEYWORDS: list[tuple[str, ComponentType]] = [
    ("service", "service"),
    ("repository", "repository"),
    ("controller", "controller"),
]
MODEL_BASES = frozenset({"BaseModel", "Model", "TypedDict", "NamedTuple"})
MODEL_DECORATORS = ("dataclass", "attr.s", "attrs.define", "define", "frozen")


@dataclass
class ClassAnalysis:
    """Everything known about one class, ready for JSON serialization."""
    class_name: str
    component_type: ComponentType
    dependencies: list[DependencyModel] = field(default_factory=list)
    methods: list[MethodFlowAnalysis] = field(default_factory=list)
    business_patterns: list[BusinessLogicPattern] = field(default_factory=list)
    test_scenarios: list[TestScenario] = field(default_factory=list)
    edge_cases: dict[str, list[EdgeCaseInfo]] = field(default_factory=dict)
    boundary_values: dict[str, list[BoundaryAnalysis]] = field(default_factory=dict)
    property_tests: dict[str, list[PropertyBasedTestCase]] = field(default_factory=dict)
    concurrency: ConcurrencyAnalysis | None = None
    available_methods: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return any(m.truncated for m in self.methods)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "class_name": self.class_name,
            "component_type": self.component_type,
            "dependencies": [d.to_dict() for d in self.dependencies],
            "methods": [m.to_dict() for m in self.methods],
            "business_patterns": [p.to_dict() for p in self.business_patterns],
            "test_scenarios": [s.to_dict() for s in self.test_scenarios],
            "edge_cases": {
                name: [c.to_dict() for c in cases] for name, cases in self.edge_cases.items()
            },
            "boundary_values": {
                name: [b.to_dict() for b in analyses] for name, analyses in self.boundary_values.items()
            },
            "property_tests": {
                name: [t.to_dict() for t in tests] for name, tests in self.property_tests.items()
            },
            "concurrency": self.concurrency.to_dict() if self.concurrency else None,
            "available_methods": self.available_methods,
            "truncated": self.truncated,
            "warnings": self.warnings,
        }


def load_class(code: str, class_name: str | None = None) -> ClassModel:
    """
    Parse source and return the class to analyze.

    Raises:
        SourceSyntaxError: Unparseable source
        ClassNotFoundError: No class, or no class with that name
    """
    return find_class(extract_classes(parse_module(code)), class_name)


def analyze_class(
    code: str,
    class_name: str | None = None,
    method_name: str | None = None,
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> ClassAnalysis:
    """
    Run the full analysis pipeline over one class.

    Args:
        code: Python source code
        class_name: Class to analyze (first class when None)
        method_name: Restrict method-level results to this method
        policy: Heuristic tables for classification

    Returns:
        ClassAnalysis bundle

    Raises:
        SourceSyntaxError, ClassNotFoundError, MethodNotFoundError
    """
    cls = load_class(code, class_name)
    return analyze_class_model(cls, method_name, policy)


def analyze_class_model(
    cls: ClassModel,
    method_name: str | None = None,
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> ClassAnalysis:
    """Run the pipeline over an already parsed class."""

    # Step 1: Collaborators
    dependencies = analyze_dependencies(cls)

    # Step 2: Method flows (focused analysis may target any method, public or not)
    if method_name is not None:
        method = cls.get_method(method_name)
        if method is None:
            raise MethodNotFoundError(
                f"Method '{method_name}' not found in class '{cls.name}'. "
                f"Available methods: {', '.join(cls.method_names)}",
                cls.method_names
            )
        methods = [analyze_method_flow(method, dependencies, policy)]
    else:
        methods = analyze_method_flows(cls, dependencies, policy)

    # Step 3: Patterns and scenarios
    analysis = ClassAnalysis(
        class_name=cls.name,
        component_type=detect_component_type(cls),
        dependencies=dependencies,
        methods=methods,
        business_patterns=detect_patterns(methods),
        test_scenarios=generate_test_scenarios(methods, dependencies, cls),
        concurrency=analyze_concurrency(cls),
        available_methods=cls.method_names
    )

    # Step 4: Input catalogs per method
    for flow in methods:
        method = cls.get_method(flow.name)
        edge_cases = detect_edge_cases(method, policy)
        analysis.edge_cases[flow.name] = edge_cases
        analysis.boundary_values[flow.name] = generate_boundary_analysis(method, policy)
        analysis.property_tests[flow.name] = generate_property_tests(method, edge_cases, policy)

    analysis.warnings = _generate_warnings(cls, methods)

    logger.info(
        f"Analyzed {cls.name}: {len(methods)} methods, {len(dependencies)} dependencies, "
        f"{len(analysis.warnings)} warnings"
    )
    return analysis


def detect_component_type(cls: ClassModel) -> ComponentType:
    """Guess the architectural role of a class from its name, bases and decorators."""
    lowered = cls.name.lower()
    for suffix, component_type in COMPONENT_SUFFIXES:
        if lowered.endswith(suffix):
            return component_type
    for keyword, component_type in COMPONENT_KEYWORDS:
        if keyword in lowered:
            return component_type

    if MODEL_BASES.intersection(b.split(".")[-1] for b in cls.base_classes):
        return "model"
    if any(d.split("(")[0].endswith(MODEL_DECORATORS) for d in cls.decorators):
        return "model"
    if cls.methods and all(m.is_static or m.is_classmethod for m in cls.methods):
        return "utility"
    return "unit"


def _generate_warnings(cls: ClassModel, methods: list[MethodFlowAnalysis]) -> list[str]:
    """Diagnostic notes for results that fell back to a default."""
    warnings = []

    for flow in methods:
        method = cls.get_method(flow.name)

        if flow.truncated:
            warnings.append(
                f"Method '{flow.name}' exceeds {MAX_NODES_PER_METHOD} AST nodes; analysis truncated"
            )

        missing = [
            p.name for p in method.parameters
            if not p.type_hint and p.kind not in ("var_positional", "var_keyword")
        ]
        if missing:
            warnings.append(
                f"Method '{flow.name}' has parameters without type hints ({', '.join(missing)}); "
                f"treated as object"
            )

    if not methods:
        warnings.append(f"Class '{cls.name}' has no public methods to analyze")

    return warnings
