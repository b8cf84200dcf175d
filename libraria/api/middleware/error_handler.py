"""
Error Handling for Libraria

Centralized error handling:
- Structured error responses
- Logging of errors
- Exception translation
"""

import traceback
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from libraria.exceptions import LibrariaException

from .logging import get_request_id


def create_error_response(
    message: str,
    code: str,
    status_code: int,
    detail: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Create standardized error response."""
    content = {
        "msg": message,
        "code": code,
        "error": detail,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _validation_detail(errors: list[dict]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(LibrariaException)
    async def libraria_exception_handler(request: Request, exc: LibrariaException):
        logger.warning(f"{request.method} {request.url.path}: {exc.code} - {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return create_error_response(
            message=exc.message,
            code=exc.code,
            status_code=exc.status_code,
            detail=exc.detail,
            extra=exc.extra,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        detail = _validation_detail(exc.errors())
        logger.warning(f"Request validation error on {request.url.path}: {detail}")
        return create_error_response(
            message="Datos inválidos",
            code="VALIDATION_ERROR",
            status_code=400,
            detail=detail,
        )

    @app.exception_handler(PydanticValidationError)
    async def validation_exception_handler(request: Request, exc: PydanticValidationError):
        logger.warning(f"Validation error: {str(exc)}")
        return create_error_response(
            message="Datos inválidos",
            code="VALIDATION_ERROR",
            status_code=400,
            detail=str(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return create_error_response(
            message=str(exc.detail),
            code="HTTP_ERROR",
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"[{get_request_id()}] Unhandled exception on {request.method} {request.url.path}: "
            f"{type(exc).__name__}: {str(exc)}\n{traceback.format_exc()}"
        )
        return create_error_response(
            message="Error interno del servidor",
            code="INTERNAL_ERROR",
            status_code=500,
            detail=str(exc),
        )
