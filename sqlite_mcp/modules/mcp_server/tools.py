"""Tool catalog and dispatcher for the MCP surface."""

import sqlite3
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from loguru import logger
from mcp import types
from pydantic import BaseModel, Field, ValidationError

from ...errors import ExecutionError, InvalidArguments, SQLiteMCPError, UnknownOperation
from ..database.engine import Database
from ..database.executor import QueryExecutor
from ..database.identifiers import quote_identifier
from ..database.models import ColumnInfo, TableInfo
from ..database.normalizer import outcome_payload
from .results import ToolResult, to_tool_result, tool_error

LIST_TABLES_SQL = "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name"


class SqlQueryArgs(BaseModel):
    sql: str = Field(..., description="The SQL query to execute")


class ListTablesArgs(BaseModel):
    pass


class DescribeTableArgs(BaseModel):
    table_name: str = Field(..., description="Name of the table to describe")


class TableInfoArgs(BaseModel):
    table_name: str = Field(..., description="Name of the table to get info for")


@dataclass(frozen=True)
class ToolSpec:
    """A catalog entry: public name, description and argument schema."""

    name: str
    description: str
    args_model: type[BaseModel]

    def input_schema(self) -> dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def to_mcp_tool(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
        )


TOOL_CATALOG: tuple[ToolSpec, ...] = (
    ToolSpec(
        name="sql_query",
        description="Execute a SQL query on the SQLite database",
        args_model=SqlQueryArgs,
    ),
    ToolSpec(
        name="list_tables",
        description="List all tables in the database",
        args_model=ListTablesArgs,
    ),
    ToolSpec(
        name="describe_table",
        description="Get the schema/structure of a specific table",
        args_model=DescribeTableArgs,
    ),
    ToolSpec(
        name="get_table_info",
        description="Get detailed information about a table including column details",
        args_model=TableInfoArgs,
    ),
)


def _format_validation_error(tool_name: str, exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"]) or "arguments"
        problems.append(f"{location}: {err['msg']}")
    return f"Invalid arguments for {tool_name}: " + "; ".join(problems)


class ToolDispatcher:
    """
    Routes a named tool invocation to its handler.

    ``invoke`` never raises: unknown tools, bad arguments and engine
    failures all come back as error ToolResults.
    """

    def __init__(self, database: Database, executor: QueryExecutor | None = None):
        self.database = database
        self.executor = executor or QueryExecutor(database)
        self._specs = {spec.name: spec for spec in TOOL_CATALOG}
        self._handlers: dict[str, Callable[[Any], Awaitable[Any]]] = {
            "sql_query": self._sql_query,
            "list_tables": self._list_tables,
            "describe_table": self._describe_table,
            "get_table_info": self._get_table_info,
        }

    @property
    def tool_names(self) -> list[str]:
        return [spec.name for spec in TOOL_CATALOG]

    def list_tools(self) -> list[types.Tool]:
        return [spec.to_mcp_tool() for spec in TOOL_CATALOG]

    def validate(self, name: str, arguments: dict[str, Any] | None) -> BaseModel:
        """
        Resolve the tool and validate its arguments.

        Raises:
            UnknownOperation: name is not in the catalog
            InvalidArguments: arguments do not match the tool's schema
        """
        spec = self._specs.get(name)
        if spec is None:
            raise UnknownOperation(name)
        try:
            return spec.args_model.model_validate(arguments or {})
        except ValidationError as e:
            raise InvalidArguments(_format_validation_error(name, e)) from e

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """Central dispatcher for tool calls coming from MCP clients."""
        logger.info(f"Tool call: {name} with args: {arguments}")

        try:
            args = self.validate(name, arguments)
            payload = await self._handlers[name](args)
        except (InvalidArguments, UnknownOperation) as e:
            logger.warning(f"Tool call rejected: {e}")
            return tool_error(str(e))
        except SQLiteMCPError as e:
            logger.error(f"Error in tool call {name}: {e}")
            return tool_error(str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in tool call {name}: {e}")
            return tool_error(str(e))

        return to_tool_result(payload)

    # Tool bodies

    async def _sql_query(self, args: SqlQueryArgs) -> dict[str, Any]:
        outcome = await self.executor.execute(args.sql)
        return outcome_payload(outcome)

    async def _list_tables(self, args: ListTablesArgs) -> list[str]:
        rows = await self._fetch_all(LIST_TABLES_SQL)
        return [row["name"] for row in rows]

    async def _describe_table(self, args: DescribeTableArgs) -> list[dict[str, Any]]:
        columns = await self._columns(args.table_name)
        return [column.model_dump() for column in columns]

    async def _get_table_info(self, args: TableInfoArgs) -> dict[str, Any]:
        table_name = args.table_name
        quoted = quote_identifier(table_name)

        columns = await self._columns(table_name)
        count_row = await self._fetch_one(f"SELECT COUNT(*) AS count FROM {quoted}")
        foreign_keys = await self._fetch_all(f"PRAGMA foreign_key_list({quoted})")
        indexes = await self._fetch_all(f"PRAGMA index_list({quoted})")

        info = TableInfo(
            table_name=table_name,
            row_count=count_row["count"] if count_row else 0,
            columns=columns,
            foreign_keys=foreign_keys,
            indexes=indexes,
        )
        return info.model_dump()

    # Engine helpers

    async def _columns(self, table_name: str) -> list[ColumnInfo]:
        quoted = quote_identifier(table_name)
        rows = await self._fetch_all(f"PRAGMA table_info({quoted})")
        # PRAGMA table_info returns nothing for a missing table
        if not rows:
            raise ExecutionError(f"no such table: {table_name}")
        return [ColumnInfo.model_validate(row) for row in rows]

    async def _fetch_all(self, sql: str) -> list[dict[str, Any]]:
        try:
            return await self.database.fetch_all(sql)
        except sqlite3.Error as e:
            raise ExecutionError(str(e), sql=sql) from e

    async def _fetch_one(self, sql: str) -> dict[str, Any] | None:
        try:
            return await self.database.fetch_one(sql)
        except sqlite3.Error as e:
            raise ExecutionError(str(e), sql=sql) from e
