"""
Libraria - FastAPI Backend.
"""

from .main import app, create_app, main
from .dependencies import (
    Settings,
    get_settings,
    get_db,
    AuthorizationGate,
    authenticated,
    catalog_editors,
    admins_only,
)

__all__ = [
    # Application
    "app",
    "create_app",
    "main",
    # Dependencies
    "Settings",
    "get_settings",
    "get_db",
    "AuthorizationGate",
    "authenticated",
    "catalog_editors",
    "admins_only",
]
