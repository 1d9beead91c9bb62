"""Configuration for the SQLite MCP server."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings, overridable through SQLITE_MCP_* environment variables."""

    # HTTP
    host: str = "0.0.0.0"
    port: int = 8081

    # Database
    db_path: Path = Path("northwind.db")

    # Server metadata advertised on GET / and during MCP initialize
    server_name: str = "sqlite-mcp-server"
    server_version: str = "1.0.0"
    server_description: str = "SQLite MCP Server"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SQLITE_MCP_",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
