"""Pydantic models for the HTTP surface."""

from typing import Any

from pydantic import BaseModel, Field, StrictStr


class QueryRequest(BaseModel):
    """Body of ``POST /query``."""

    query: StrictStr | None = Field(default=None, description="SQL statement to execute")
    # Accepted for compatibility; only one database is served
    database: Any = None


class ServerInfoResponse(BaseModel):
    """Metadata returned by a plain ``GET /``."""

    name: str
    version: str
    description: str
    endpoints: dict[str, str]
    capabilities: dict[str, Any] = Field(default_factory=dict)
