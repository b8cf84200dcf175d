"""
Exception taxonomy for Libraria.

Every business failure raised by the services maps to one of these classes.
The API layer turns them into structured JSON error responses.
"""

from typing import Any, Optional


class LibrariaException(Exception):
    """Base exception for Libraria errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        detail: Optional[str] = None,
        extra: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        self.extra = extra or {}
        super().__init__(message)


class ValidationError(LibrariaException):
    """Missing or malformed input, including malformed identifiers."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            detail=detail,
        )


class UnauthenticatedError(LibrariaException):
    """Missing, invalid or expired bearer token."""

    def __init__(self, message: str = "Token requerido", detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="UNAUTHENTICATED",
            status_code=401,
            detail=detail,
        )


class UnauthorizedError(LibrariaException):
    """Role or ownership check failed, or wrong secret at login."""

    def __init__(self, message: str = "No autorizado", status_code: int = 403):
        super().__init__(
            message=message,
            code="UNAUTHORIZED",
            status_code=status_code,
        )


class NotFoundError(LibrariaException):
    """Record missing or filtered out by its active flag."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=404,
            detail=detail,
        )


class ConflictError(LibrariaException):
    """Duplicate email, duplicate book or unavailable book."""

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        extra: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=400,
            detail=detail,
            extra=extra,
        )
