"""
MCP server entrypoint for pytest-planner.

This module is intentionally thin:
- sets up the MCP server and the shared session store
- registers tools (from handlers)
- routes tool calls to handlers
- sweeps expired sessions in the background
"""


from __future__ import annotations

import asyncio
import contextlib
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent

from .constants import CLEANUP_INTERVAL_SECONDS
from .core.planner import SessionStore
from .handlers.core import HANDLERS as CORE_HANDLERS
from .handlers.core import TOOLS as CORE_TOOLS
from .handlers.session import TOOLS as SESSION_TOOLS
from .handlers.session import build_handlers
from .services import PlanningService

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
server = Server("pytest-planner")

# One store for the whole process
session_store = SessionStore()
planning_service = PlanningService(session_store)


# =============================================================================
# Tool Registration
# =============================================================================

# Combine all tools
ALL_TOOLS = [*CORE_TOOLS, *SESSION_TOOLS]

# Combine all handlers
ALL_HANDLERS = {**CORE_HANDLERS, **build_handlers(planning_service)}


@server.list_tools()
async def list_tools():
    """List all available tools."""
    return ALL_TOOLS


# =============================================================================
# Tool Router
# =============================================================================

@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Route tool calls to appropriate handlers."""
    logger.info(f"Tool called: {name}")

    handler = ALL_HANDLERS.get(name)

    if handler:
        return await handler(arguments or {})

    return [TextContent(type="text", text=f"Unknown tool: {name}")]


# =============================================================================
# Background cleanup
# =============================================================================

async def cleanup_sessions(store: SessionStore, interval: float = CLEANUP_INTERVAL_SECONDS):
    """Drop expired sessions every `interval` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        store.cleanup()


# =============================================================================
# Entry Point
# =============================================================================

async def run_server():
    """Run the MCP server."""
    logger.info("Starting Pytest Planner MCP Server...")
    logger.info(f"Registered {len(ALL_TOOLS)} tools: {[t.name for t in ALL_TOOLS]}")

    cleanup_task = asyncio.create_task(cleanup_sessions(session_store))
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options()
            )
    finally:
        cleanup_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await cleanup_task


def main():
    """Entry point."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
