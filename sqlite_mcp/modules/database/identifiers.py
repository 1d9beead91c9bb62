"""Identifier checks for table names interpolated into introspection SQL."""

import re

from ...errors import InvalidArguments

_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*")


def quote_identifier(name: str) -> str:
    """
    Validate ``name`` as a plain SQL identifier and return it double-quoted.

    Table names cannot be bound as parameters, so anything outside the
    allow-list (quotes, semicolons, whitespace, empty names) is rejected.

    Raises:
        InvalidArguments: name is not a plain identifier
    """
    if not isinstance(name, str) or not _IDENTIFIER_RE.fullmatch(name):
        raise InvalidArguments(f"Invalid table name: {name!r}")
    return f'"{name}"'
