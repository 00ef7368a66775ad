"""Registry for session MCP tools.

These handlers share one PlanningService (and so one SessionStore), which
build_handlers() binds into each handler.
"""

from functools import partial

from ...services import PlanningService
from .complete_method import (
    TOOL_DEFINITION as COMPLETE_METHOD_TOOL,
)
from .complete_method import (
    handle as handle_complete_method,
)
from .get_next_method import (
    TOOL_DEFINITION as GET_NEXT_METHOD_TOOL,
)
from .get_next_method import (
    handle as handle_get_next_method,
)
from .plan_test_generation import (
    TOOL_DEFINITION as PLAN_TEST_GENERATION_TOOL,
)
from .plan_test_generation import (
    handle as handle_plan_test_generation,
)
from .track_progress import (
    TOOL_DEFINITION as TRACK_PROGRESS_TOOL,
)
from .track_progress import (
    handle as handle_track_progress,
)

# All session tool definitions
TOOLS = [
    PLAN_TEST_GENERATION_TOOL,
    GET_NEXT_METHOD_TOOL,
    COMPLETE_METHOD_TOOL,
    TRACK_PROGRESS_TOOL,
]


def build_handlers(service: PlanningService) -> dict:
    """Tool name to handler mapping, bound to one PlanningService."""
    return {
        "plan_test_generation": partial(handle_plan_test_generation, service=service),
        "get_next_method": partial(handle_get_next_method, service=service),
        "complete_method": partial(handle_complete_method, service=service),
        "track_progress": partial(handle_track_progress, service=service),
    }


__all__ = [
    # Tool definitions
    "TOOLS",
    "PLAN_TEST_GENERATION_TOOL",
    "GET_NEXT_METHOD_TOOL",
    "COMPLETE_METHOD_TOOL",
    "TRACK_PROGRESS_TOOL",
    # Handlers
    "build_handlers",
    "handle_plan_test_generation",
    "handle_get_next_method",
    "handle_complete_method",
    "handle_track_progress",
]
