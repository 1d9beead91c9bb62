"""Direct request/response API: one statement in, one outcome out."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from ..errors import ExecutionError
from ..modules.database import QueryExecutor
from ..modules.database.normalizer import error_payload, outcome_payload
from ..schemas import QueryRequest

router = APIRouter(tags=["query"])


def get_executor(request: Request) -> QueryExecutor:
    """Dependency to get the query executor."""
    executor = getattr(request.app.state, "executor", None)
    if executor is None:
        raise HTTPException(status_code=503, detail="Query executor not initialized")
    return executor


@router.post("/query")
async def run_query(
    request: Request,
    executor: QueryExecutor = Depends(get_executor),
) -> JSONResponse:
    """
    Execute one SQL statement.

    Returns 400 when ``query`` is missing, 200 with ``success: false`` when
    SQLite rejects the statement, and 500 for malformed or non-object bodies.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=500, content=error_payload("Invalid JSON"))

    if not isinstance(body, dict):
        logger.warning(f"Rejected /query request with a non-object body: {type(body).__name__}")
        return JSONResponse(status_code=500, content=error_payload("Request body must be a JSON object"))

    try:
        payload = QueryRequest.model_validate(body)
    except ValidationError:
        return JSONResponse(status_code=400, content=error_payload("Query must be a string"))

    if not payload.query:
        logger.warning("Rejected /query request without a query")
        return JSONResponse(status_code=400, content=error_payload("Query is required"))

    if payload.database is not None:
        logger.debug(f"Ignoring database selector: {payload.database!r}")

    try:
        outcome = await executor.execute(payload.query)
    except ExecutionError as e:
        return JSONResponse(status_code=200, content=error_payload(str(e)))
    except Exception as e:
        logger.exception(f"Unexpected error executing query: {e}")
        return JSONResponse(status_code=500, content=error_payload(str(e)))

    return JSONResponse(status_code=200, content=outcome_payload(outcome))
