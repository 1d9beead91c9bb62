"""Shape query outcomes into the one wire payload both transports share."""

import base64
import json
from typing import Any

from .models import MutationResult, QueryOutcome, RowSet

SUCCESS_MESSAGE = "Query executed successfully"


def _wire_value(value: Any) -> Any:
    # Blobs travel as base64 text
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


def wire_rows(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{column: _wire_value(value) for column, value in row.items()} for row in rows]


def outcome_payload(outcome: QueryOutcome) -> dict[str, Any]:
    """
    Serialize a QueryOutcome.

    Returns:
        RowSet -> {"success": True, "data": [...], "rowCount": n}
        MutationResult -> {"success": True, "data": {"changes", "lastID"},
                           "message": "Query executed successfully"}
    """
    if isinstance(outcome, RowSet):
        return {
            "success": True,
            "data": wire_rows(outcome.rows),
            "rowCount": outcome.row_count,
        }
    if isinstance(outcome, MutationResult):
        return {
            "success": True,
            "data": outcome.model_dump(by_alias=True),
            "message": SUCCESS_MESSAGE,
        }
    raise TypeError(f"Unsupported outcome type: {type(outcome).__name__}")


def error_payload(message: str) -> dict[str, Any]:
    return {"success": False, "error": message}


def to_json_text(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=_wire_value)

