"""Statement classification and execution."""

import sqlite3
from enum import Enum

from loguru import logger

from ...errors import ExecutionError
from .engine import Database
from .models import MutationResult, QueryOutcome, RowSet

# Leading keywords routed to the row-returning path
READ_KEYWORDS = ("select", "pragma", "show", "describe", "explain")


class StatementKind(str, Enum):
    READ = "read"
    WRITE = "write"


def classify_statement(sql: str) -> StatementKind:
    """
    Classify a statement by its leading keyword.

    This is a textual heuristic, not a SQL parser: the statement is trimmed,
    lowercased and matched against ``READ_KEYWORDS``. Everything else is a
    write.
    """
    lowered = sql.strip().lower()
    if lowered.startswith(READ_KEYWORDS):
        return StatementKind.READ
    return StatementKind.WRITE


class QueryExecutor:
    """Runs one statement against the shared database and returns a QueryOutcome."""

    def __init__(self, database: Database):
        self.database = database

    async def execute(self, sql: str) -> QueryOutcome:
        """
        Execute a single statement.

        Read statements always produce a RowSet (possibly empty), anything
        else a MutationResult. Engine errors are re-raised as ExecutionError
        with SQLite's message untouched.

        Raises:
            ExecutionError: SQLite rejected the statement
        """
        kind = classify_statement(sql)
        try:
            if kind is StatementKind.READ:
                rows = await self.database.fetch_all(sql)
                logger.info(f"Query returned {len(rows)} rows | SQL: {sql[:100]}")
                return RowSet.from_rows(rows)

            changes, last_rowid = await self.database.run(sql)
        except sqlite3.Error as e:
            logger.error(f"Query execution error: {e} | SQL: {sql[:100]}")
            raise ExecutionError(str(e), sql=sql) from e

        logger.info(f"Statement affected {changes} rows | SQL: {sql[:100]}")
        return MutationResult(changes=changes, last_insert_id=last_rowid)
