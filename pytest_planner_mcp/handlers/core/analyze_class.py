"""MCP handler for the analyze_class tool (delegates to AnalysisService)."""

from __future__ import annotations

import json

from mcp.types import TextContent, Tool

from ...services import AnalysisService, ServiceResult

# =============================================================================
# Tool Definition
# =============================================================================

TOOL_DEFINITION = Tool(
    name="analyze_class",
    description=(
        "Analyze a Python class for unit test planning. Returns collaborators "
        "with mock strategies, per-method complexity, flow type and error paths, "
        "business logic patterns, test scenarios, edge cases, boundary values, "
        "property-based test specs and concurrency findings."
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
                "description": "Class to analyze (defaults to the first class in the file)"
            },
            "method_name": {
                "type": "string",
                "description": "Focus the method-level results on a single method"
            }
        }
    }
)


# =============================================================================
# Handler
# =============================================================================

async def handle(arguments: dict) -> list[TextContent]:
    """Analyze a class from 'code' or 'file_path' and return the JSON bundle."""
    service = AnalysisService()

    result = service.analyze(
        code=arguments.get("code"),
        file_path=arguments.get("file_path"),
        class_name=arguments.get("class_name"),
        method_name=arguments.get("method_name")
    )

    if not result.success:
        return _error_response(result)

    return [TextContent(type="text", text=json.dumps(result.data.to_dict(), indent=2))]


# =============================================================================
# Helpers
# =============================================================================

def _error_response(result: ServiceResult) -> list[TextContent]:
    """Create error response from failed ServiceResult."""
    text = f"Error: {result.error.message}"
    if result.error.available and "Available" not in result.error.message:
        text += f"\nAvailable: {', '.join(result.error.available)}"
    return [TextContent(type="text", text=text)]
