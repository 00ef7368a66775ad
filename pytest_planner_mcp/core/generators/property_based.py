"""
Property-Based Test Generator - Input strategies plus laws per method.

Every method gets a random, a boundary and a mutation case; methods with
at most three parameters also get an exhaustive case over a small value
lattice. Metamorphic law cases (idempotence, commutativity, associativity,
order invariance) are added when the method name suggests the law.

Values and assertions are Python source text for the renderer: inputs
are expressions ("0", '""'), assertions are boolean expressions over
``result`` / ``error`` and the law-specific result names.
"""

import math
from dataclasses import dataclass, field
from typing import Literal

from ...constants import (
    BOUNDARY_ITERATIONS,
    EXHAUSTIVE_MAX_ITERATIONS,
    EXHAUSTIVE_MAX_PARAMS,
    METAMORPHIC_ITERATIONS,
    MUTATION_ITERATIONS,
    ORDER_INVARIANCE_ITERATIONS,
    RANDOM_ITERATIONS,
    RANDOM_SEED,
)
from ..analyzer.models import MethodInfo, ParameterInfo
from ..analyzer.policy import DEFAULT_POLICY, AnalysisPolicy
from ..analyzer.type_classifier import TypeClassification, classify_parameter
from .extractors.boundary_values import generate_boundary_values, get_default_value
from .extractors.constraints import maybe_constraints
from .extractors.edge_cases import EdgeCaseInfo, detect_edge_cases

Strategy = Literal["exhaustive", "random", "boundary", "mutation"]
GeneratorKind = Literal["random", "sequence", "combination", "mutation"]
PropertyKind = Literal["invariant", "postcondition", "precondition", "metamorphic"]

# Small value lattices for exhaustive combination
NUMBER_LATTICE = ("-1", "0", "1", "sys.maxsize", "-sys.maxsize - 1", "float('nan')", "float('inf')")
STRING_LATTICE = ('""', '"a"', '"test"', '"a" * 1000', "None")
BOOLEAN_LATTICE = ("True", "False", "None")
ARRAY_LATTICE = ("[]", "[1]", "[1, 2, 3]", "None")
OBJECT_LATTICE = ("None", "{}", "[]")

RANDOM_NUMBER_RANGE = (-1_000_000, 1_000_000)
RANDOM_STRING_PATTERN = "[a-zA-Z0-9]{0,100}"
MAX_STRING_LENGTH = 10_000

# Valid starting point for mutation, per primary category
MUTATION_BASE_VALUES = {
    "string": '"test"',
    "number": "42",
    "boolean": "True",
    "array": "[]",
    "object": "{}",
}

# Runtime type check per primary category, for return-type invariants
RUNTIME_TYPES = {
    "string": "str",
    "number": "(int, float)",
    "boolean": "bool",
    "array": "(list, tuple, set, frozenset)",
    "object": "object",
}

# Name keywords -> metamorphic law
IDEMPOTENT_KEYWORDS = ("get", "find", "search", "validate", "check")
COMMUTATIVE_KEYWORDS = ("add", "merge", "combine", "union")
ASSOCIATIVE_KEYWORDS = ("add", "concat", "merge", "union")
ORDER_INVARIANT_KEYWORDS = ("sort", "aggregate", "count", "sum")


@dataclass(frozen=True)
class GeneratorSpec:
    """How to produce values for one parameter."""
    kind: GeneratorKind
    base_value: str | None = None
    value_range: tuple[int, int] | None = None
    options: tuple[str, ...] = ()
    pattern: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result: dict = {"type": self.kind}
        if self.base_value is not None:
            result["base_value"] = self.base_value
        if self.value_range is not None:
            result["range"] = {"min": self.value_range[0], "max": self.value_range[1]}
        if self.options:
            result["options"] = list(self.options)
        if self.pattern is not None:
            result["pattern"] = self.pattern
        return result


@dataclass(frozen=True)
class GeneratorConstraints:
    allow_null: bool = False
    allow_empty: bool = True
    min_length: int | None = None
    max_length: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {"allow_null": self.allow_null, "allow_empty": self.allow_empty}
        if self.min_length is not None:
            result["min_length"] = self.min_length
        if self.max_length is not None:
            result["max_length"] = self.max_length
        return result


@dataclass(frozen=True)
class InputGenerator:
    parameter_name: str
    type: str
    generator: GeneratorSpec
    constraints: GeneratorConstraints = field(default_factory=GeneratorConstraints)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "parameter_name": self.parameter_name,
            "type": self.type,
            "generator": self.generator.to_dict(),
            "constraints": self.constraints.to_dict(),
        }


@dataclass(frozen=True)
class PropertyAssertion:
    """A law the method's result must satisfy (priority 1 is most important)."""
    name: str
    description: str
    kind: PropertyKind
    assertion: str
    priority: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "description": self.description,
            "type": self.kind,
            "assertion": self.assertion,
            "priority": self.priority,
        }


@dataclass(frozen=True)
class PropertyBasedTestCase:
    name: str
    description: str
    strategy: Strategy
    input_generators: tuple[InputGenerator, ...]
    properties: tuple[PropertyAssertion, ...]
    iterations: int
    seed: int | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "name": self.name,
            "description": self.description,
            "strategy": self.strategy,
            "input_generators": [g.to_dict() for g in self.input_generators],
            "properties": [p.to_dict() for p in self.properties],
            "iterations": self.iterations,
        }
        if self.seed is not None:
            result["seed"] = self.seed
        return result


def generate_property_tests(
    method: MethodInfo,
    edge_cases: list[EdgeCaseInfo] | None = None,
    policy: AnalysisPolicy = DEFAULT_POLICY
) -> list[PropertyBasedTestCase]:
    """
    Build the property-based test cases for a method.

    Args:
        method: Parsed method
        edge_cases: Edge cases already detected for the method
                    (detected here when not given)
        policy: Heuristic tables used to classify parameter and return types

    Returns:
        Cases in order: exhaustive (small signatures only), random,
        boundary, mutation, then any metamorphic law cases
    """
    if edge_cases is None:
        edge_cases = detect_edge_cases(method, policy)

    params = list(method.parameters)
    cases: list[PropertyBasedTestCase] = []

    if len(params) <= EXHAUSTIVE_MAX_PARAMS:
        cases.append(_exhaustive_case(method, params, policy))
    cases.append(_random_case(method, params, policy))
    cases.append(_boundary_case(method, params, edge_cases, policy))
    cases.append(_mutation_case(method, params, policy))
    cases.extend(_metamorphic_cases(method, params, policy))

    return cases


# =============================================================================
# Strategies
# =============================================================================

def _exhaustive_case(
    method: MethodInfo,
    params: list[ParameterInfo],
    policy: AnalysisPolicy
) -> PropertyBasedTestCase:
    generators = tuple(
        _input(p, method, _exhaustive_generator(classify_parameter(p, policy)), policy)
        for p in params
    )
    combinations = math.prod(len(g.generator.options) for g in generators)

    return PropertyBasedTestCase(
        name=f"{method.name}_exhaustive_combinations",
        description=f"Exhaustive testing of all input combinations for {method.name}",
        strategy="exhaustive",
        input_generators=generators,
        properties=tuple(_invariant_properties(method, policy)),
        iterations=min(EXHAUSTIVE_MAX_ITERATIONS, combinations)
    )


def _random_case(method: MethodInfo, params: list[ParameterInfo], policy: AnalysisPolicy) -> PropertyBasedTestCase:
    return PropertyBasedTestCase(
        name=f"{method.name}_random_property_test",
        description=f"Random property-based testing for {method.name}",
        strategy="random",
        input_generators=_random_inputs(method, params, policy),
        properties=tuple(_invariant_properties(method, policy) + _postcondition_properties(method)),
        iterations=RANDOM_ITERATIONS,
        seed=RANDOM_SEED
    )


def _boundary_case(
    method: MethodInfo,
    params: list[ParameterInfo],
    edge_cases: list[EdgeCaseInfo],
    policy: AnalysisPolicy
) -> PropertyBasedTestCase:
    generators = tuple(
        _input(p, method, _boundary_generator(p, method, edge_cases, policy), policy)
        for p in params
    )

    return PropertyBasedTestCase(
        name=f"{method.name}_boundary_value_test",
        description=f"Boundary value analysis for {method.name}",
        strategy="boundary",
        input_generators=generators,
        properties=tuple(_invariant_properties(method, policy) + [
            PropertyAssertion(
                name="boundary_safety",
                description="Method should handle boundary values gracefully",
                kind="invariant",
                assertion="not isinstance(error, (SystemError, MemoryError, RecursionError))",
                priority=2
            ),
        ]),
        iterations=BOUNDARY_ITERATIONS
    )


def _mutation_case(method: MethodInfo, params: list[ParameterInfo], policy: AnalysisPolicy) -> PropertyBasedTestCase:
    generators = tuple(
        _input(p, method, GeneratorSpec(kind="mutation", base_value=_mutation_base(p, policy)), policy)
        for p in params
    )

    return PropertyBasedTestCase(
        name=f"{method.name}_mutation_test",
        description=f"Mutation testing with gradually corrupted inputs for {method.name}",
        strategy="mutation",
        input_generators=generators,
        properties=(
            PropertyAssertion(
                name="input_mutation_robustness",
                description="Method should be robust to input mutations",
                kind="invariant",
                assertion="error is None or isinstance(error, Exception)",
                priority=1
            ),
            PropertyAssertion(
                name="consistent_error_handling",
                description="Error handling should be consistent across mutations",
                kind="invariant",
                assertion="error is None or len(str(error)) > 0",
                priority=2
            ),
        ),
        iterations=MUTATION_ITERATIONS
    )


def _metamorphic_cases(
    method: MethodInfo,
    params: list[ParameterInfo],
    policy: AnalysisPolicy
) -> list[PropertyBasedTestCase]:
    lowered = method.name.lower()
    laws = [
        (IDEMPOTENT_KEYWORDS, "idempotency", "f(f(x)) == f(x)", "result1 == result2",
         METAMORPHIC_ITERATIONS),
        (COMMUTATIVE_KEYWORDS, "commutativity", "f(a, b) == f(b, a)", "result_ab == result_ba",
         METAMORPHIC_ITERATIONS),
        (ASSOCIATIVE_KEYWORDS, "associativity", "f(f(a, b), c) == f(a, f(b, c))",
         "result_ab_c == result_a_bc", METAMORPHIC_ITERATIONS),
        (ORDER_INVARIANT_KEYWORDS, "order_invariance", "Result should be invariant to input order",
         "result_original == result_shuffled", ORDER_INVARIANCE_ITERATIONS),
    ]

    cases = []
    for keywords, law, description, assertion, iterations in laws:
        if not any(keyword in lowered for keyword in keywords):
            continue
        cases.append(PropertyBasedTestCase(
            name=f"{method.name}_{law}_test",
            description=f"{law.replace('_', ' ').capitalize()} test for {method.name}",
            strategy="random",
            input_generators=_random_inputs(method, params, policy),
            properties=(PropertyAssertion(
                name=f"{law}_property",
                description=description,
                kind="metamorphic",
                assertion=assertion,
                priority=1
            ),),
            iterations=iterations
        ))
    return cases


# =============================================================================
# Generators
# =============================================================================

def _exhaustive_generator(classification: TypeClassification) -> GeneratorSpec:
    if classification.is_boolean:
        options = BOOLEAN_LATTICE
    elif classification.is_number:
        options = NUMBER_LATTICE
    elif classification.is_string:
        options = STRING_LATTICE
    elif classification.is_array:
        options = ARRAY_LATTICE
    else:
        options = OBJECT_LATTICE
    return GeneratorSpec(kind="sequence", options=options)


def _random_generator(classification: TypeClassification) -> GeneratorSpec:
    if classification.is_number:
        return GeneratorSpec(kind="random", value_range=RANDOM_NUMBER_RANGE)
    if classification.is_string:
        return GeneratorSpec(kind="random", pattern=RANDOM_STRING_PATTERN)
    if classification.is_boolean:
        return GeneratorSpec(kind="random", options=("True", "False"))
    if classification.is_array:
        return GeneratorSpec(kind="random", base_value="[]")
    return GeneratorSpec(kind="random", base_value="{}")


def _boundary_generator(
    param: ParameterInfo,
    method: MethodInfo,
    edge_cases: list[EdgeCaseInfo],
    policy: AnalysisPolicy
) -> GeneratorSpec:
    """Edge-case samples for the parameter followed by its boundary catalog, without repeats."""
    name = param.name.lstrip("*")
    classification = classify_parameter(param, policy)
    boundaries = generate_boundary_values(classification, maybe_constraints(param, method, policy), name)

    values = [case.sample_value for case in edge_cases if case.parameter_name == name]
    values += [boundary.value for boundary in boundaries]
    return GeneratorSpec(kind="sequence", options=tuple(dict.fromkeys(values)))


def _random_inputs(
    method: MethodInfo,
    params: list[ParameterInfo],
    policy: AnalysisPolicy
) -> tuple[InputGenerator, ...]:
    return tuple(_input(p, method, _random_generator(classify_parameter(p, policy)), policy) for p in params)


def _input(
    param: ParameterInfo,
    method: MethodInfo,
    generator: GeneratorSpec,
    policy: AnalysisPolicy
) -> InputGenerator:
    classification = classify_parameter(param, policy)
    return InputGenerator(
        parameter_name=param.name.lstrip("*"),
        type=classification.type_text,
        generator=generator,
        constraints=_generator_constraints(param, method, classification, policy)
    )


def _generator_constraints(
    param: ParameterInfo,
    method: MethodInfo,
    classification: TypeClassification,
    policy: AnalysisPolicy
) -> GeneratorConstraints:
    if not classification.is_string:
        return GeneratorConstraints(allow_null=classification.is_nullable)

    bounds = maybe_constraints(param, method, policy)
    return GeneratorConstraints(
        allow_null=classification.is_nullable,
        min_length=bounds.min_length if bounds.min_length is not None else 0,
        max_length=bounds.max_length if bounds.max_length is not None else MAX_STRING_LENGTH
    )


def _mutation_base(param: ParameterInfo, policy: AnalysisPolicy) -> str:
    classification = classify_parameter(param, policy)
    if classification.fallback:
        # No usable annotation: guess from the parameter name
        guess = get_default_value(None, param.name)
        if guess != "None":
            return guess
    return MUTATION_BASE_VALUES.get(classification.primary, "{}")


# =============================================================================
# Properties
# =============================================================================

def _invariant_properties(method: MethodInfo, policy: AnalysisPolicy) -> list[PropertyAssertion]:
    properties = [PropertyAssertion(
        name="no_crash_invariant",
        description="Method should not crash with valid inputs",
        kind="invariant",
        assertion="error is None or isinstance(error, Exception)",
        priority=1
    )]

    if method.return_type:
        properties.append(PropertyAssertion(
            name="return_type_invariant",
            description=f"Return type should match expected type: {method.return_type}",
            kind="invariant",
            assertion=_return_type_check(method.return_type, policy),
            priority=2
        ))

    return properties


def _postcondition_properties(method: MethodInfo) -> list[PropertyAssertion]:
    lowered = method.name.lower()
    properties = []

    if "create" in lowered:
        properties.append(PropertyAssertion(
            name="create_postcondition",
            description="Created entity should have required properties",
            kind="postcondition",
            assertion="result is not None and getattr(result, 'id', None) is not None",
            priority=2
        ))
    if "update" in lowered:
        properties.append(PropertyAssertion(
            name="update_postcondition",
            description="Updated entity should have updated timestamp",
            kind="postcondition",
            assertion="result is not None and result.updated_at >= original.updated_at",
            priority=2
        ))

    return properties


def _return_type_check(return_type: str, policy: AnalysisPolicy) -> str:
    classification = policy.classify_type(return_type)
    if classification.is_nullable and classification.primary == "nullable":
        return "result is None"

    check = f"isinstance(result, {RUNTIME_TYPES.get(classification.primary, 'object')})"
    if classification.is_nullable:
        return f"result is None or {check}"
    return check
