"""
Access logging for the Libraria API.

One line per request: method, path, status, elapsed time, the caller the
authorization gate resolved (if any) and a correlation id echoed back in
``X-Request-ID``. Credentials in request bodies never reach the log.
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger("libraria.api")

REDACTED = "[REDACTED]"


@dataclass
class LoggingConfig:
    """Access log settings."""

    enabled: bool = True
    log_request_body: bool = False
    max_body_bytes: int = 4096

    # Probes are polled constantly; keep them out of the log
    quiet_paths: frozenset = frozenset({"/health", "/favicon.ico"})

    # Body keys that carry credentials (register, login, token responses)
    redacted_fields: frozenset = field(
        default_factory=lambda: frozenset({"password", "hashed_password", "token", "access_token", "jwt_secret"})
    )

    slow_request_ms: float = 2000.0
    request_id_header: str = "X-Request-ID"


class StructuredLogFormatter(logging.Formatter):
    """Render records as single-line JSON, with the request id when one is bound."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            entry["request_id"] = request_id

        access = getattr(record, "access", None)
        if access:
            entry.update(access)

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


def redact_sensitive_data(data: Any, redacted_fields: frozenset) -> Any:
    """Replace credential values in a decoded JSON body, at any depth."""
    if isinstance(data, dict):
        return {
            key: REDACTED if key.lower() in redacted_fields else redact_sensitive_data(value, redacted_fields)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_sensitive_data(item, redacted_fields) for item in data]
    return data


def get_request_id() -> str:
    return request_id_var.get()


def _caller(request: Request) -> Optional[str]:
    identity = getattr(request.state, "user", None)
    if identity is None:
        return None
    return f"{identity.id}:{identity.role.value}"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log line for every request."""

    def __init__(self, app: FastAPI, config: Optional[LoggingConfig] = None):
        super().__init__(app)
        self.config = config or LoggingConfig()

    async def _read_body(self, request: Request) -> Optional[str]:
        body = await request.body()
        if not body:
            return None
        if len(body) > self.config.max_body_bytes:
            return f"<{len(body)} bytes>"
        try:
            decoded = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "<non-JSON body>"
        return json.dumps(redact_sensitive_data(decoded, self.config.redacted_fields), ensure_ascii=False)

    def _level_for(self, status_code: int, elapsed_ms: float) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400 or elapsed_ms > self.config.slow_request_ms:
            return logging.WARNING
        return logging.INFO

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        header = self.config.request_id_header
        request_id = request.headers.get(header) or uuid.uuid4().hex[:8]
        request_id_var.set(request_id)

        if not self.config.enabled or request.url.path in self.config.quiet_paths:
            response = await call_next(request)
            response.headers[header] = request_id
            return response

        body = await self._read_body(request) if self.config.log_request_body else None

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[header] = request_id

        access = {
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
            "caller": _caller(request),
        }
        if request.url.query:
            access["query"] = request.url.query
        if body:
            access["body"] = body

        message = f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)"
        if elapsed_ms > self.config.slow_request_ms:
            message = f"[SLOW] {message}"

        logger.log(self._level_for(response.status_code, elapsed_ms), message, extra={"access": access})
        return response


def setup_logging(
    app: FastAPI,
    config: Optional[LoggingConfig] = None,
    structured: bool = True,
) -> None:
    """
    Install the access log middleware.

    Args:
        app: FastAPI application instance.
        config: Access log settings.
        structured: Emit JSON lines on the ``libraria`` logger instead of
            the plain ``basicConfig`` format.
    """
    if structured:
        package_logger = logging.getLogger("libraria")
        if not any(isinstance(h.formatter, StructuredLogFormatter) for h in package_logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredLogFormatter())
            package_logger.addHandler(handler)
            package_logger.propagate = False
        package_logger.setLevel(logging.INFO)

    app.add_middleware(RequestLoggingMiddleware, config=config or LoggingConfig())
