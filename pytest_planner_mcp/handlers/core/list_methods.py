"""MCP handler for the list_methods tool."""

from __future__ import annotations

import json

from mcp.types import TextContent, Tool

from ...services import AnalysisService, ServiceResult

# =============================================================================
# Tool Definition
# =============================================================================

TOOL_DEFINITION = Tool(
    name="list_methods",
    description=(
        "List the public methods of a class with complexity, priority, "
        "dependency count and error-path count, plus the recommended order "
        "for step-by-step test generation."
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
                "description": "Class to list (defaults to the first class in the file)"
            }
        }
    }
)


# =============================================================================
# Handler
# =============================================================================

async def handle(arguments: dict) -> list[TextContent]:
    service = AnalysisService()

    result = service.list_methods(
        code=arguments.get("code"),
        file_path=arguments.get("file_path"),
        class_name=arguments.get("class_name")
    )

    if not result.success:
        return _error_response(result)

    listing = result.data
    response = {
        "class_name": listing.class_name,
        "component_type": listing.component_type,
        "methods": [
            {
                "name": m.method_name,
                "complexity": m.complexity,
                "priority": m.priority,
                "dependencies": len(m.dependencies),
                "error_paths": m.error_count
            }
            for m in listing.methods
        ],
        "recommended_order": listing.recommended_order
    }

    return [TextContent(type="text", text=json.dumps(response, indent=2))]


# =============================================================================
# Helpers
# =============================================================================

def _error_response(result: ServiceResult) -> list[TextContent]:
    """Create error response from failed ServiceResult."""
    return [TextContent(type="text", text=f"Error: {result.error.message}")]
