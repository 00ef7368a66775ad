"""Services package.

Exposes service classes and shared result types used by the MCP handlers.
"""


# Base utilities
from .analysis import AnalysisService, MethodListing
from .base import (
    ErrorCode,
    ServiceError,
    ServiceResult,
)

# Code loading
from .code_loader import (
    CodeLoader,
    LoadedCode,
)
from .planning import NextMethod, PlanningService, PlanResult, ProgressReport

__all__ = [
    # Base
    "ServiceResult",
    "ServiceError",
    "ErrorCode",
    # Code loading
    "CodeLoader",
    "LoadedCode",
    # Services
    "AnalysisService",
    "MethodListing",
    "PlanningService",
    "PlanResult",
    "NextMethod",
    "ProgressReport",
]


# =============================================================================
# Convenience factory functions
# =============================================================================

def create_analysis_service(code_loader: CodeLoader | None = None) -> AnalysisService:
    """Factory for AnalysisService (optionally inject a CodeLoader)."""

    return AnalysisService(code_loader=code_loader)


def create_planning_service(
    store,
    analysis_service: AnalysisService | None = None
) -> PlanningService:
    """Factory for PlanningService bound to a SessionStore."""

    return PlanningService(store=store, analysis_service=analysis_service)
