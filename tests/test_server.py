"""Tests for the pytest-planner-mcp server."""

import asyncio
import json
from datetime import datetime, timedelta

import pytest

from pytest_planner_mcp.core.planner import SessionStore


class TestServerBasics:
    """Basic server tests."""

    def test_version(self):
        from pytest_planner_mcp import __version__
        assert __version__ == "0.1.0"

    def test_server_creation(self):
        from pytest_planner_mcp.server import server
        assert server.name == "pytest-planner"

    def test_all_tools_registered(self):
        from pytest_planner_mcp.server import ALL_HANDLERS, ALL_TOOLS

        names = [tool.name for tool in ALL_TOOLS]

        assert names == [
            "analyze_class",
            "list_methods",
            "plan_test_generation",
            "get_next_method",
            "complete_method",
            "track_progress",
        ]
        assert set(ALL_HANDLERS) == set(names)


class TestRouting:
    """Tests for call_tool routing."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        from pytest_planner_mcp.server import call_tool

        result = await call_tool("generate_everything", {})

        assert result[0].text == "Unknown tool: generate_everything"

    @pytest.mark.asyncio
    async def test_session_tools_share_store(self):
        from pytest_planner_mcp.server import call_tool, session_store

        planned = await call_tool("plan_test_generation", {
            "code": "class Greeter:\n    def greet(self, name: str) -> str:\n        return name\n"
        })
        session_id = json.loads(planned[0].text)["session_id"]

        assert session_store.get_session(session_id) is not None

        progress = await call_tool("track_progress", {"session_id": session_id})
        assert json.loads(progress[0].text)["progress"]["total"] == 1


class TestCleanupTask:
    """Tests for the background session sweep."""

    @pytest.mark.asyncio
    async def test_sweeps_expired_sessions(self):
        from pytest_planner_mcp.server import cleanup_sessions

        now = [datetime(2024, 1, 1)]
        store = SessionStore(retention_seconds=60, clock=lambda: now[0])
        session = store.create_session("a.py", "A", "unit", "tests/test_a.py", [])
        now[0] += timedelta(minutes=5)

        task = asyncio.create_task(cleanup_sessions(store, interval=0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert store.get_session(session.session_id) is None
