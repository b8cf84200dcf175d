"""
Cross-origin policy for browser clients of the catalog.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


LOCAL_FRONTENDS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
)


@dataclass
class CORSConfig:
    """Origins allowed to call the API, plus what they may send and read."""

    allowed_origins: list[str] = field(default_factory=list)
    allow_any_origin: bool = False
    # Clients send the bearer token in a header, never a cookie
    allow_credentials: bool = False
    allowed_methods: tuple = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
    allowed_headers: tuple = ("Authorization", "Content-Type", "Accept", "Accept-Language", "X-Request-ID")
    expose_headers: tuple = ("X-Request-ID",)
    max_age: int = 3600


def get_cors_config(environment: Optional[str] = None) -> CORSConfig:
    """
    Build the policy for an environment.

    Development and test accept any origin. Production accepts only what
    ``CORS_ALLOWED_ORIGINS`` (comma separated) lists. Extra origins from
    that variable are honoured in every environment.
    """
    environment = environment or os.getenv("LIBRARIA_ENV", "development")

    extra = [o.strip() for o in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",") if o.strip()]

    if environment == "production":
        return CORSConfig(allowed_origins=extra, max_age=7200)
    return CORSConfig(allowed_origins=[*LOCAL_FRONTENDS, *extra], allow_any_origin=True)


def setup_cors(app: FastAPI, config: Optional[CORSConfig] = None) -> None:
    config = config or get_cors_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.allow_any_origin else config.allowed_origins,
        allow_credentials=config.allow_credentials,
        allow_methods=list(config.allowed_methods),
        allow_headers=list(config.allowed_headers),
        expose_headers=list(config.expose_headers),
        max_age=config.max_age,
    )
