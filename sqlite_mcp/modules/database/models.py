"""Pydantic models for query outcomes and introspection."""

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class RowSet(BaseModel):
    """Outcome of a row-returning statement."""

    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = Field(default=0, ge=0, serialization_alias="rowCount")

    @classmethod
    def from_rows(cls, rows: list[dict[str, Any]]) -> "RowSet":
        return cls(rows=rows, row_count=len(rows))


class MutationResult(BaseModel):
    """Outcome of a statement executed on the mutation path."""

    model_config = ConfigDict(populate_by_name=True)

    changes: int = Field(default=0, ge=0)
    last_insert_id: int | None = Field(default=None, alias="lastID")


QueryOutcome = Union[RowSet, MutationResult]


class ColumnInfo(BaseModel):
    """One row of ``PRAGMA table_info``."""

    cid: int
    name: str
    type: str
    notnull: int
    dflt_value: Any = None
    pk: int


class TableInfo(BaseModel):
    """Aggregate view of a table, recomputed on every request."""

    table_name: str
    row_count: int
    columns: list[ColumnInfo]
    foreign_keys: list[dict[str, Any]]
    indexes: list[dict[str, Any]]

