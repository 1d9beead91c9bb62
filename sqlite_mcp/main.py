"""
SQLite MCP Server - Unified API

Serves one SQLite database over an MCP SSE endpoint and a plain JSON API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .modules.database import Database, QueryExecutor
from .modules.mcp_server import SessionRegistry, SQLiteMCPServer, ToolDispatcher
from .routers import mcp, query

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application around one shared database handle."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle manager."""
        logger.info(f"=== Starting {settings.server_name} ===")

        # Failing to open the database aborts startup
        database = Database(settings.db_path)
        database.open()

        executor = QueryExecutor(database)
        dispatcher = ToolDispatcher(database, executor)
        app.state.database = database
        app.state.executor = executor
        app.state.mcp_server = SQLiteMCPServer(
            dispatcher,
            name=settings.server_name,
            version=settings.server_version,
        )
        app.state.session_registry = SessionRegistry()

        logger.info(f"MCP endpoint: http://{settings.host}:{settings.port}/")
        logger.info(f"REST API endpoint: http://{settings.host}:{settings.port}/query")

        yield

        logger.info("=== Shutting down ===")
        app.state.session_registry.close_all()
        database.close()

    app = FastAPI(
        title=settings.server_name,
        description=settings.server_description,
        version=settings.server_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    app.include_router(query.router)
    app.include_router(mcp.router)

    @app.options("/{full_path:path}")
    async def preflight(full_path: str) -> Response:
        return Response(status_code=200, headers=CORS_HEADERS)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown routes and unsupported methods both read as "not found"
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    return app


# Default instance for `uvicorn sqlite_mcp.main:app`; the CLI builds its own
app = create_app()
