"""Long-lived SSE channel carrying MCP frames for one session."""

import json

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from loguru import logger
from mcp import types
from mcp.shared.message import SessionMessage
from pydantic import ValidationError

from ...errors import TransportFault


def format_sse(event: str, data: str) -> str:
    """Render one Server-Sent Events frame."""
    lines = "".join(f"data: {line}\n" for line in data.splitlines() or [""])
    return f"event: {event}\n{lines}\n"


class SseChannel:
    """
    Two in-memory pipes between the HTTP layer and an MCP server loop.

    inbound: client-to-server frames delivered by ``POST /?sessionId=...``,
    read by the server loop.
    outbound: server-to-client frames written by the server loop, streamed
    to the caller as ``message`` events.
    """

    def __init__(self) -> None:
        self.session_id: str | None = None
        self._inbound_send: MemoryObjectSendStream[SessionMessage | Exception]
        self.inbound_receive: MemoryObjectReceiveStream[SessionMessage | Exception]
        self.outbound_send: MemoryObjectSendStream[SessionMessage]
        self._outbound_receive: MemoryObjectReceiveStream[SessionMessage]

        self._inbound_send, self.inbound_receive = anyio.create_memory_object_stream(0)
        self.outbound_send, self._outbound_receive = anyio.create_memory_object_stream(0)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def endpoint_event(self) -> str:
        """First frame of every stream: where to POST follow-up messages."""
        return format_sse("endpoint", f"/?sessionId={self.session_id}")

    async def deliver(self, body: bytes) -> None:
        """
        Parse a client frame and hand it to the server loop.

        Raises:
            TransportFault: the body is not a JSON-RPC message, or the
                channel is already closed
        """
        if self._closed:
            raise TransportFault(f"Session {self.session_id} is closed")
        try:
            message = types.JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Malformed frame for session {self.session_id}: {e}")
            raise TransportFault(f"Could not parse message: {e}") from e

        try:
            await self._inbound_send.send(SessionMessage(message))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            raise TransportFault(f"Session {self.session_id} is closed") from e

    async def events(self):
        """Yield SSE frames: the endpoint event, then every outbound message."""
        yield self.endpoint_event()
        async with self._outbound_receive:
            async for session_message in self._outbound_receive:
                payload = session_message.message.model_dump(
                    by_alias=True, exclude_none=True, mode="json"
                )
                yield format_sse("message", json.dumps(payload))

    def close(self) -> None:
        """
        Close the writing ends of both pipes. Safe to call more than once.

        The server loop sees end-of-stream on inbound and the event stream
        ends once outbound drains. Reading ends are closed by their readers.
        """
        if self._closed:
            return
        self._closed = True
        self._inbound_send.close()
        self.outbound_send.close()
        logger.debug(f"Channel closed for session {self.session_id}")
