import asyncio

import pytest
from httpx import AsyncClient

from sqlite_mcp.routers.mcp import open_event_stream
from sqlite_mcp.modules.mcp_server import SseChannel


@pytest.mark.asyncio
async def test_query_requires_query(client: AsyncClient):
    """Empty body returns 400 with the standard error shape"""
    response = await client.post("/query", json={})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Query is required"}


@pytest.mark.asyncio
async def test_query_empty_string_is_missing(client: AsyncClient):
    response = await client.post("/query", json={"query": ""})

    assert response.status_code == 400
    assert response.json()["error"] == "Query is required"


@pytest.mark.asyncio
async def test_query_must_be_string(client: AsyncClient):
    response = await client.post("/query", json={"query": 42})

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_query_select(client: AsyncClient):
    response = await client.post("/query", json={"query": "SELECT 1 AS x"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [{"x": 1}], "rowCount": 1}


@pytest.mark.asyncio
async def test_query_delete_without_match(client: AsyncClient):
    response = await client.post("/query", json={"query": "DELETE FROM t WHERE id=999999"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"changes": 0, "lastID": None},
        "message": "Query executed successfully",
    }


@pytest.mark.asyncio
async def test_query_insert_then_select(client: AsyncClient):
    inserted = await client.post(
        "/query", json={"query": "INSERT INTO t (id, label) VALUES (5, 'five')"}
    )
    assert inserted.json()["data"] == {"changes": 1, "lastID": 5}

    selected = await client.post("/query", json={"query": "SELECT label FROM t WHERE id = 5"})
    assert selected.json()["data"] == [{"label": "five"}]


@pytest.mark.asyncio
async def test_query_database_selector_is_ignored(client: AsyncClient):
    response = await client.post(
        "/query", json={"query": "SELECT COUNT(*) AS n FROM customers", "database": "other"}
    )

    assert response.status_code == 200
    assert response.json()["data"] == [{"n": 3}]


@pytest.mark.asyncio
async def test_query_engine_error_is_200(client: AsyncClient):
    response = await client.post("/query", json={"query": "SELECT * FROM nowhere"})

    assert response.status_code == 200
    assert response.json() == {"success": False, "error": "no such table: nowhere"}


@pytest.mark.asyncio
async def test_query_malformed_json_is_500(client: AsyncClient):
    response = await client.post(
        "/query", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Invalid JSON"}


@pytest.mark.asyncio
async def test_root_returns_metadata(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "sqlite-mcp-server"
    assert data["version"] == "1.0.0"
    assert data["description"] == "SQLite MCP Server"
    assert data["endpoints"] == {"mcp": "/", "query": "/query"}
    assert data["capabilities"]["tools"] == [
        "sql_query",
        "list_tables",
        "describe_table",
        "get_table_info",
    ]


@pytest.mark.asyncio
async def test_options_preflight(client: AsyncClient):
    response = await client.options("/query")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_cors_header_on_responses(client: AsyncClient):
    response = await client.get("/", headers={"Origin": "http://example.com"})

    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_unknown_route_is_404(client: AsyncClient):
    assert (await client.get("/nowhere")).status_code == 404
    assert (await client.put("/query", json={})).status_code == 404


@pytest.mark.asyncio
async def test_post_without_session_is_404(client: AsyncClient):
    assert (await client.post("/", json={})).status_code == 404
    assert (await client.post("/?sessionId=unknown", json={})).status_code == 404


@pytest.mark.asyncio
async def test_post_routes_frame_to_session(client: AsyncClient, app):
    registry = app.state.session_registry
    channel = SseChannel()
    session_id = registry.register(channel)
    receiver = asyncio.create_task(channel.inbound_receive.receive())

    response = await client.post(
        f"/?sessionId={session_id}",
        json={"jsonrpc": "2.0", "id": 7, "method": "ping"},
    )

    assert response.status_code == 202
    message = await asyncio.wait_for(receiver, timeout=5)
    assert message.message.root.id == 7


@pytest.mark.asyncio
async def test_malformed_frame_closes_only_that_session(client: AsyncClient, app):
    registry = app.state.session_registry
    bad, good = SseChannel(), SseChannel()
    bad_id = registry.register(bad)
    good_id = registry.register(good)

    response = await client.post(f"/?sessionId={bad_id}", content=b"garbage")

    assert response.status_code == 400
    assert bad.closed
    assert bad_id not in registry
    assert registry.lookup(good_id) is good
    assert not good.closed
    # The process keeps serving
    assert (await client.post("/query", json={"query": "SELECT 1 AS x"})).status_code == 200


@pytest.mark.asyncio
async def test_event_stream_registers_and_unregisters(client: AsyncClient, app):
    registry = app.state.session_registry
    response = open_event_stream(app.state.mcp_server, registry)

    assert response.media_type == "text/event-stream"
    frames = response.body_iterator
    first = await asyncio.wait_for(frames.__anext__(), timeout=5)

    assert first.startswith("event: endpoint\ndata: /?sessionId=")
    session_id = first.split("sessionId=", 1)[1].strip()
    assert session_id in registry

    await frames.aclose()

    assert session_id not in registry


@pytest.mark.asyncio
async def test_query_delete_after_insert_has_null_last_id(client: AsyncClient):
    await client.post("/query", json={"query": "INSERT INTO t (id, label) VALUES (77, 'x')"})

    response = await client.post("/query", json={"query": "DELETE FROM t WHERE id=999999"})

    assert response.json()["data"] == {"changes": 0, "lastID": None}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"null", b"[1, 2]", b"5", b'"SELECT 1"'])
async def test_query_non_object_body_is_500(client: AsyncClient, body):
    response = await client.post(
        "/query", content=body, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 500
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_root_with_event_stream_accept_opens_session(client: AsyncClient, app):
    """GET / negotiated to SSE streams the endpoint event first"""
    registry = app.state.session_registry
    first_body = asyncio.Event()
    messages = []

    async def receive():
        await first_body.wait()
        return {"type": "http.disconnect"}

    async def send(message):
        messages.append(message)
        if message["type"] == "http.response.body" and message.get("body"):
            first_body.set()

    # Driven by hand: ASGITransport buffers the whole response
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": "/",
        "raw_path": b"/",
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"test"), (b"accept", b"text/event-stream")],
        "client": ("127.0.0.1", 50000),
        "server": ("test", 80),
    }

    await asyncio.wait_for(app(scope, receive, send), timeout=5)

    start = messages[0]
    assert start["type"] == "http.response.start"
    assert start["status"] == 200
    headers = dict(start["headers"])
    assert headers[b"content-type"].startswith(b"text/event-stream")

    body = next(m["body"] for m in messages if m["type"] == "http.response.body" and m.get("body"))
    assert body.startswith(b"event: endpoint\ndata: /?sessionId=")
    assert len(registry) == 0
