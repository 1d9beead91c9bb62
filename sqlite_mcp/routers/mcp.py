"""Streaming MCP endpoint: SSE channel on GET, client frames on POST."""

import asyncio

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from loguru import logger

from ..errors import TransportFault
from ..modules.mcp_server import SessionRegistry, SQLiteMCPServer, SseChannel
from ..schemas import ServerInfoResponse

router = APIRouter(tags=["mcp"])


def get_mcp_server(request: Request) -> SQLiteMCPServer:
    """Dependency to get MCP server instance."""
    server = getattr(request.app.state, "mcp_server", None)
    if server is None:
        raise HTTPException(status_code=503, detail="MCP server not initialized")
    return server


def get_session_registry(request: Request) -> SessionRegistry:
    """Dependency to get the session registry."""
    registry = getattr(request.app.state, "session_registry", None)
    if registry is None:
        raise HTTPException(status_code=503, detail="Session registry not initialized")
    return registry


def _wants_event_stream(request: Request) -> bool:
    return "text/event-stream" in request.headers.get("accept", "")


def _on_session_done(task: asyncio.Task, channel: SseChannel) -> None:
    channel.close()
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"MCP session {channel.session_id} failed: {exc}")


@router.get("/")
async def root(request: Request):
    """Server metadata, or an MCP event stream when the client accepts one."""
    mcp_server = get_mcp_server(request)
    if _wants_event_stream(request):
        return open_event_stream(mcp_server, get_session_registry(request))

    settings = request.app.state.settings
    return ServerInfoResponse(
        name=mcp_server.name,
        version=mcp_server.version,
        description=settings.server_description,
        endpoints={"mcp": "/", "query": "/query"},
        capabilities=mcp_server.capabilities(),
    )


def open_event_stream(mcp_server: SQLiteMCPServer, registry: SessionRegistry) -> StreamingResponse:
    """Register a new session and stream its outbound frames until it closes."""
    channel = SseChannel()
    session_id = registry.register(channel)

    task = asyncio.create_task(mcp_server.run(channel))
    task.add_done_callback(lambda t: _on_session_done(t, channel))

    async def stream():
        try:
            async for frame in channel.events():
                yield frame
        finally:
            channel.close()
            task.cancel()
            registry.unregister(session_id)

    return StreamingResponse(
        stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/")
async def post_message(
    request: Request,
    session_id: str | None = Query(default=None, alias="sessionId"),
):
    """Deliver one client frame to the session's channel."""
    registry = get_session_registry(request)
    channel = registry.get(session_id) if session_id else None
    if channel is None:
        return PlainTextResponse("Not Found", status_code=404)

    body = await request.body()
    try:
        await channel.deliver(body)
    except TransportFault as e:
        # A bad frame ends this session only
        channel.close()
        registry.unregister(session_id)
        return PlainTextResponse(str(e), status_code=400)

    return PlainTextResponse("Accepted", status_code=202)
