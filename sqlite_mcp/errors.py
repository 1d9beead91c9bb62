"""Exception hierarchy shared by the executor, the dispatcher and the routers."""


class SQLiteMCPError(Exception):
    """Base exception for all server errors."""

    pass


class InvalidArguments(SQLiteMCPError):
    """Caller omitted or malformed a required input. Raised before any engine call."""

    pass


class UnknownOperation(SQLiteMCPError):
    """The requested tool is not part of the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ExecutionError(SQLiteMCPError):
    """SQLite rejected the statement. The message is the engine's own text."""

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql


class TransportFault(SQLiteMCPError):
    """Malformed request body or broken channel."""

    pass


class SessionNotFound(TransportFault):
    """No live session is registered under the given identifier."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class DatabaseNotOpen(SQLiteMCPError):
    """The shared database handle was used before open() or after close()."""

    pass
