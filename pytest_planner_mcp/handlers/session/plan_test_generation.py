"""MCP handler for the plan_test_generation tool (opens a session)."""

from __future__ import annotations

import json

from mcp.types import TextContent, Tool

from ...services import PlanningService, ServiceResult

# =============================================================================
# Tool Definition
# =============================================================================

TOOL_DEFINITION = Tool(
    name="plan_test_generation",
    description=(
        "Create a step-by-step plan for generating unit tests for a class, "
        "organized into phases by complexity and dependencies. Returns a "
        "session_id for get_next_method, complete_method and track_progress."
    ),
    inputSchema={
        "type": "object",
        "properties": {
            "file_path": {
                "type": "string",
                "description": "Path to the Python file containing the class"
            },
            "code": {
                "type": "string",
                "description": "Python code content (alternative to file_path)"
            },
            "class_name": {
                "type": "string",
                "description": "Class to plan for (defaults to the first class in the file)"
            },
            "test_type": {
                "type": "string",
                "enum": ["service", "repository", "controller", "model", "utility", "unit"],
                "description": "Type of component being tested (detected when omitted)"
            },
            "output_path": {
                "type": "string",
                "description": "Custom output path for the test file"
            }
        }
    }
)


# =============================================================================
# Handler
# =============================================================================

async def handle(arguments: dict, service: PlanningService) -> list[TextContent]:
    result = service.create_plan(
        code=arguments.get("code"),
        file_path=arguments.get("file_path"),
        class_name=arguments.get("class_name"),
        test_type=arguments.get("test_type"),
        output_path=arguments.get("output_path")
    )

    if not result.success:
        return _error_response(result)

    session = result.data.session
    plan = result.data.plan
    response = {
        "session_id": session.session_id,
        "class_name": session.class_name,
        "file_path": session.file_path,
        "output_path": session.output_path,
        "test_type": session.test_type,
        "total_methods": session.total_methods,
        "estimated_time": plan.estimated_time,
        "methodology": plan.methodology,
        "phases": plan.to_dict()["phases"],
        "next_steps": [
            f"Call get_next_method with session_id '{session.session_id}'",
            "Write the tests for that method",
            "Call complete_method with the method name and test path",
            "Call track_progress to see what is left"
        ]
    }

    return [TextContent(type="text", text=json.dumps(response, indent=2))]


# =============================================================================
# Helpers
# =============================================================================

def _error_response(result: ServiceResult) -> list[TextContent]:
    """Create error response from failed ServiceResult."""
    return [TextContent(type="text", text=f"Error: {result.error.message}")]
