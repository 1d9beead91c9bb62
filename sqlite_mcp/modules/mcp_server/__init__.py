"""MCP surface: tool catalog, SDK binding, SSE channels and session registry."""

from .channel import SseChannel
from .results import ToolResult
from .server import SQLiteMCPServer
from .session_manager import SessionRegistry
from .tools import TOOL_CATALOG, ToolDispatcher

__all__ = [
    "SseChannel",
    "SQLiteMCPServer",
    "SessionRegistry",
    "TOOL_CATALOG",
    "ToolDispatcher",
    "ToolResult",
]
