"""Command line entry point."""

from pathlib import Path

import typer
import uvicorn
from loguru import logger

from .config import Settings
from .log import setup_logging
from .main import create_app

app = typer.Typer(help="Serve a SQLite database over MCP (SSE) and a JSON API")


@app.callback()
def main() -> None:
    """SQLite MCP server tools."""


@app.command()
def serve(
    db_path: Path | None = typer.Option(None, "--db-path", help="SQLite database file"),
    host: str | None = typer.Option(None, help="Interface to bind"),
    port: int | None = typer.Option(None, help="Port to listen on"),
    log_level: str | None = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
) -> None:
    """Start the HTTP server."""
    overrides = {
        key: value
        for key, value in {
            "db_path": db_path,
            "host": host,
            "port": port,
            "log_level": log_level,
        }.items()
        if value is not None
    }
    settings = Settings(**overrides)
    setup_logging(settings.log_level)

    logger.info(f"{settings.server_name} running on http://{settings.host}:{settings.port}")
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=5,
    )


if __name__ == "__main__":
    app()
