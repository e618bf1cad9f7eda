"""FastAPI application exposing every catalog table over REST.

``PUT`` creates, ``POST`` updates, and every body is wrapped as ``{"response": ...}`` or ``{"error": ...}``.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import Body, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .core import DBExplorer
from .exceptions import (
    BadRequestError,
    ExplorerError,
    InvalidFieldTypeError,
    RecordNotFoundError,
    UnknownTableError,
)
from .models import RequestDescriptor, fits_bind_integer

logger = logging.getLogger(__name__)

_ERROR_STATUS: tuple[tuple[type[ExplorerError], int], ...] = (
    (UnknownTableError, status.HTTP_404_NOT_FOUND),
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidFieldTypeError, status.HTTP_400_BAD_REQUEST),
    (BadRequestError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: ExplorerError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _parse_row_id(raw: str) -> int:
    try:
        row_id = int(raw)
    except ValueError:
        raise BadRequestError(f"invalid record id: {raw}") from None
    if not fits_bind_integer(row_id):
        raise BadRequestError(f"record id out of range: {raw}")
    return row_id


def _envelope(content: Any) -> dict[str, Any]:
    return {"response": content}


def create_app(explorer: DBExplorer) -> FastAPI:
    """
    Build the REST application around an explorer.

    Args:
        explorer: Explorer whose catalog is already built

    Returns:
        FastAPI application with one set of routes serving every table
    """
    # No docs routes: every first path segment belongs to the tables.
    app = FastAPI(title="DB Explorer", version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.explorer = explorer

    @app.exception_handler(ExplorerError)
    async def handle_explorer_error(request: Request, exc: ExplorerError) -> JSONResponse:
        status_code = status_for(exc)
        if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "bad request"})

    @app.get("/")
    def list_tables() -> dict[str, Any]:
        return _envelope({"tables": explorer.list_tables()})

    @app.get("/{table}")
    @app.get("/{table}/", include_in_schema=False)
    def list_records(table: str, request: Request) -> dict[str, Any]:
        descriptor = RequestDescriptor(table=table, params=dict(request.query_params))
        return _envelope({"records": explorer.list_records(descriptor)})

    @app.get("/{table}/{row_id}")
    def get_record(table: str, row_id: str) -> dict[str, Any]:
        descriptor = RequestDescriptor(table=table, row_id=_parse_row_id(row_id))
        return _envelope({"record": explorer.get_record(descriptor)})

    @app.put("/{table}")
    @app.put("/{table}/", include_in_schema=False)
    def create_record(table: str, payload: Annotated[Any, Body()]) -> dict[str, Any]:
        return _envelope(explorer.create_record(RequestDescriptor(table=table), payload))

    @app.post("/{table}/{row_id}")
    def update_record(table: str, row_id: str, payload: Annotated[Any, Body()]) -> dict[str, Any]:
        descriptor = RequestDescriptor(table=table, row_id=_parse_row_id(row_id))
        return _envelope(explorer.update_record(descriptor, payload))

    @app.delete("/{table}/{row_id}")
    def delete_record(table: str, row_id: str) -> dict[str, Any]:
        descriptor = RequestDescriptor(table=table, row_id=_parse_row_id(row_id))
        return _envelope(explorer.delete_record(descriptor))

    return app
