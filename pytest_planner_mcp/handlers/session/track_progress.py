"""MCP handler for the track_progress tool."""

from __future__ import annotations

import json

from mcp.types import TextContent, Tool

from ...services import PlanningService, ServiceResult

# =============================================================================
# Tool Definition
# =============================================================================

TOOL_DEFINITION = Tool(
    name="track_progress",
    description=(
        "Show progress of a test generation session: completed and remaining "
        "methods, percentage, phase status and the recommended next method."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "session_id": {
                "type": "string",
                "description": "Session ID from plan_test_generation"
            }
        },
        "required": ["session_id"]
    }
)


# =============================================================================
# Handler
# =============================================================================

async def handle(arguments: dict, service: PlanningService) -> list[TextContent]:
    session_id = arguments.get("session_id")
    if not session_id:
        return [TextContent(type="text", text="Error: 'session_id' is required")]

    result = service.progress(session_id)

    if not result.success:
        return _error_response(result)

    return [TextContent(type="text", text=json.dumps(result.data.to_dict(), indent=2))]


# =============================================================================
# Helpers
# =============================================================================

def _error_response(result: ServiceResult) -> list[TextContent]:
    """Create error response from failed ServiceResult."""
    return [TextContent(type="text", text=f"Error: {result.error.message}")]
