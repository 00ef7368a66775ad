"""
Pytest Planner MCP Server

Class analysis and step-by-step unit test planning for Python code.
Analyze, Plan, Track.
"""

__version__ = "0.1.0"

# Public API
from .core import ClassAnalysis, SessionStore, analyze_class

__all__ = [
    "__version__",
    "analyze_class",
    "ClassAnalysis",
    "SessionStore",
]
