"""MCP handler for the complete_method tool (marks a method as tested)."""

from __future__ import annotations

import json

from mcp.types import TextContent, Tool

from ...services import PlanningService, ServiceResult

# =============================================================================
# Tool Definition
# =============================================================================

TOOL_DEFINITION = Tool(
    name="complete_method",
    description=(
        "Mark a method as tested in a session, record where its tests live, "
        "and advance the plan. Returns the updated progress."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "session_id": {
                "type": "string",
                "description": "Session ID from plan_test_generation"
            },
            "method_name": {
                "type": "string",
                "description": "Method whose tests were written"
            },
            "test_path": {
                "type": "string",
                "description": "Test file for the method (defaults to the session output path)"
            }
        },
        "required": ["session_id", "method_name"]
    }
)


# =============================================================================
# Handler
# =============================================================================

async def handle(arguments: dict, service: PlanningService) -> list[TextContent]:
    session_id = arguments.get("session_id")
    method_name = arguments.get("method_name")
    if not session_id or not method_name:
        return [TextContent(type="text", text="Error: 'session_id' and 'method_name' are required")]

    result = service.complete_method(session_id, method_name, arguments.get("test_path"))

    if not result.success:
        return _error_response(result)

    response = {
        "session_id": session_id,
        "completed": method_name,
        "progress": result.data.to_dict()
    }

    return [TextContent(type="text", text=json.dumps(response, indent=2))]


# =============================================================================
# Helpers
# =============================================================================

def _error_response(result: ServiceResult) -> list[TextContent]:
    """Create error response from failed ServiceResult."""
    return [TextContent(type="text", text=f"Error: {result.error.message}")]
