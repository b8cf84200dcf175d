"""
Cross-cutting HTTP concerns: error envelopes, access logging and CORS.
"""

from .error_handler import setup_exception_handlers, create_error_response
from .cors import CORSConfig, get_cors_config, setup_cors
from .logging import (
    LoggingConfig,
    RequestLoggingMiddleware,
    StructuredLogFormatter,
    get_request_id,
    setup_logging,
)

__all__ = [
    "setup_exception_handlers",
    "create_error_response",
    "CORSConfig",
    "get_cors_config",
    "setup_cors",
    "LoggingConfig",
    "RequestLoggingMiddleware",
    "StructuredLogFormatter",
    "get_request_id",
    "setup_logging",
]
