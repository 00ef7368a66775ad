"""Registry for stateless MCP tool definitions and handlers."""

from .analyze_class import (
    TOOL_DEFINITION as ANALYZE_CLASS_TOOL,
)
from .analyze_class import (
    handle as handle_analyze_class,
)
from .list_methods import (
    TOOL_DEFINITION as LIST_METHODS_TOOL,
)
from .list_methods import (
    handle as handle_list_methods,
)

# All core tool definitions
TOOLS = [
    ANALYZE_CLASS_TOOL,
    LIST_METHODS_TOOL,
]

# Tool name to handler mapping
HANDLERS = {
    "analyze_class": handle_analyze_class,
    "list_methods": handle_list_methods,
}


__all__ = [
    # Tool definitions
    "TOOLS",
    "ANALYZE_CLASS_TOOL",
    "LIST_METHODS_TOOL",
    # Handlers
    "HANDLERS",
    "handle_analyze_class",
    "handle_list_methods",
]
