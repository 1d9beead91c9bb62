"""Tool results handed back to the MCP SDK."""

from typing import Any

from mcp import types
from pydantic import BaseModel

from ..database.normalizer import to_json_text


class ToolResult(BaseModel):
    """What a tool invocation hands back to the MCP layer. Never raised."""

    text: str
    is_error: bool = False

    def to_call_tool_result(self) -> types.CallToolResult:
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=self.text)],
            isError=self.is_error,
        )


def to_tool_result(payload: Any) -> ToolResult:
    """Wrap any JSON-able payload as a successful tool result."""
    return ToolResult(text=to_json_text(payload))


def tool_error(message: str) -> ToolResult:
    return ToolResult(text=f"Error: {message}", is_error=True)
