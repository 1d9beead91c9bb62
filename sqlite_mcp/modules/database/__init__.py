"""SQLite access: shared handle, executor and result shaping."""

from .engine import Database
from .executor import QueryExecutor, StatementKind, classify_statement
from .models import MutationResult, QueryOutcome, RowSet, TableInfo

__all__ = [
    "Database",
    "QueryExecutor",
    "StatementKind",
    "classify_statement",
    "MutationResult",
    "QueryOutcome",
    "RowSet",
    "TableInfo",
]
