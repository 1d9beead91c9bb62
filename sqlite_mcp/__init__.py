"""SQLite MCP Server: one SQLite database over MCP (SSE) and a JSON API."""

__version__ = "1.0.0"
