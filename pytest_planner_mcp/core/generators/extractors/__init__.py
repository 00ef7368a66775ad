"""Per-parameter input catalogs: constraints, edge cases and boundary values."""

from .boundary_values import analyze_boundaries, generate_boundary_analysis, generate_boundary_values
from .constraints import ParameterConstraints, maybe_constraints
from .edge_cases import EdgeCaseInfo, EdgeCaseKind, detect_edge_cases

__all__ = [
    "maybe_constraints",
    "ParameterConstraints",
    "detect_edge_cases",
    "EdgeCaseInfo",
    "EdgeCaseKind",
    "generate_boundary_analysis",
    "generate_boundary_values",
    "analyze_boundaries",
]
