"""
Shared constants used across the project.
"""

from typing import Final

# File constraints
MAX_CODE_SIZE: Final[int] = 1_000_000  # 1MB
ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset({'.py'})

# Upper bound on AST nodes collected per method body; larger bodies are truncated
MAX_NODES_PER_METHOD: Final[int] = 20_000

# Method complexity classes (score = 1 + conditionals + loops + switches)
COMPLEXITY_SIMPLE_MAX: Final[int] = 3
COMPLEXITY_MEDIUM_MAX: Final[int] = 7

# Test complexity
TEST_COMPLEXITY_PARAMETER_WEIGHT: Final[float] = 0.5
TEST_COMPLEXITY_MAX: Final[int] = 10

# Mock strategy
FAKE_CALL_THRESHOLD: Final[int] = 5

# Method priority / phase thresholds (on the raw complexity score)
HIGH_PRIORITY_COMPLEXITY: Final[int] = 8
MEDIUM_PRIORITY_COMPLEXITY: Final[int] = 4

# Minutes per method in each phase
PHASE_MINUTES: Final[dict[int, int]] = {1: 8, 2: 5, 3: 3}
DEPENDENCY_MINUTES: Final[int] = 2

# Sessions
SESSION_RETENTION_SECONDS: Final[int] = 60 * 60
CLEANUP_INTERVAL_SECONDS: Final[int] = 60 * 60
SESSION_ID_PREFIX: Final[str] = "test-session"
PLAN_METHODOLOGY: Final[str] = "Complexity-driven test generation with dependency analysis"

# Property-based test iterations
EXHAUSTIVE_MAX_PARAMS: Final[int] = 3
EXHAUSTIVE_MAX_ITERATIONS: Final[int] = 100
RANDOM_ITERATIONS: Final[int] = 1000
RANDOM_SEED: Final[int] = 42
BOUNDARY_ITERATIONS: Final[int] = 200
MUTATION_ITERATIONS: Final[int] = 500
METAMORPHIC_ITERATIONS: Final[int] = 100
ORDER_INVARIANCE_ITERATIONS: Final[int] = 50
