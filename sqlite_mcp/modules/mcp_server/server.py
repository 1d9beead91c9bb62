"""MCP server exposing the SQLite tool catalog over SSE channels."""

from typing import Any

from loguru import logger
from mcp import types
from mcp.server.lowlevel import Server

from .channel import SseChannel
from .tools import ToolDispatcher


class SQLiteMCPServer:
    """
    Binds the tool dispatcher to the official MCP SDK server.

    One SDK ``Server`` answers ``tools/list`` and ``tools/call``; each SSE
    session runs its own protocol loop over its channel's streams.
    """

    def __init__(
        self,
        dispatcher: ToolDispatcher,
        name: str = "sqlite-mcp-server",
        version: str = "1.0.0",
    ):
        self.dispatcher = dispatcher
        self.name = name
        self.version = version
        self.server: Server = Server(
            name,
            version=version,
            instructions="Run SQL statements and inspect tables of a SQLite database.",
        )
        self._register_handlers()
        logger.info(f"MCP Server initialized with tools: {', '.join(dispatcher.tool_names)}")

    def _register_handlers(self) -> None:
        """Register the catalog with the SDK server."""

        @self.server.list_tools()
        async def _list_tools() -> list[types.Tool]:
            return self.dispatcher.list_tools()

        # Arguments are validated by the dispatcher against pydantic models
        @self.server.call_tool(validate_input=False)
        async def _call_tool(name: str, arguments: dict[str, Any]) -> types.CallToolResult:
            result = await self.dispatcher.invoke(name, arguments)
            return result.to_call_tool_result()

    def capabilities(self) -> dict[str, Any]:
        """Short capability summary advertised on ``GET /``."""
        return {"tools": self.dispatcher.tool_names}

    async def run(self, channel: SseChannel) -> None:
        """Serve MCP on one channel until its inbound side is closed."""
        logger.info(f"MCP session started: {channel.session_id}")
        try:
            await self.server.run(
                channel.inbound_receive,
                channel.outbound_send,
                self.server.create_initialization_options(),
            )
        finally:
            logger.info(f"MCP session ended: {channel.session_id}")
