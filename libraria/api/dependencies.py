"""
Dependency injection for FastAPI routes.

Provides injectable dependencies for:
- Configuration
- Database sessions
- Service instances
- Authentication and role-based authorization
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import AsyncGenerator, Iterable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from libraria.exceptions import UnauthenticatedError, UnauthorizedError
from libraria.security import Identity, decode_access_token
from libraria.services import BookService, ReservationService, UserService
from libraria.storage import Role


DEFAULT_JWT_SECRET = "libraria-dev-secret-change-me"


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class Settings:
    """Application settings loaded from environment."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./libraria.db"
    database_echo: bool = False

    # Tokens
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 8

    # Pagination
    default_page_size: int = 5
    max_page_size: int = 100

    # Server
    host: str = "0.0.0.0"
    port: int = 4000

    # Environment
    environment: str = "development"
    debug: bool = True

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(hours=self.access_token_expire_hours)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            database_echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", cls.jwt_algorithm),
            access_token_expire_hours=int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", cls.access_token_expire_hours)),
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", cls.default_page_size)),
            max_page_size=int(os.getenv("MAX_PAGE_SIZE", cls.max_page_size)),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", cls.port)),
            environment=os.getenv("LIBRARIA_ENV", cls.environment),
            debug=os.getenv("DEBUG", "true").lower() == "true",
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings.from_env()


# =============================================================================
# Database
# =============================================================================

# Global engine and session factory (initialized in lifespan)
_engine = None
_async_session_factory = None


def init_database(settings: Settings) -> None:
    """Initialize database engine and session factory."""
    global _engine, _async_session_factory

    _engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
    )

    _async_session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Services commit their own writes; anything left pending when a request
    fails is rolled back.

    Yields:
        AsyncSession for database operations.
    """
    if _async_session_factory is None:
        raise RuntimeError("Database not initialized. Call init_database first.")

    async with _async_session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create database tables."""
    from ..storage.models import Base
    if _engine is None:
        raise RuntimeError("Database not initialized.")

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_database() -> None:
    """Close pooled connections."""
    global _engine, _async_session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _async_session_factory = None


def get_engine():
    return _engine


# =============================================================================
# Service Dependencies
# =============================================================================

def get_user_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> UserService:
    """Dependency for user service."""
    return UserService(
        db,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        token_ttl=settings.access_token_ttl,
    )


def get_book_service(db: AsyncSession = Depends(get_db)) -> BookService:
    """Dependency for book service."""
    return BookService(db)


def get_reservation_service(db: AsyncSession = Depends(get_db)) -> ReservationService:
    """Dependency for reservation service."""
    return ReservationService(db)


# =============================================================================
# Authentication Dependencies
# =============================================================================

bearer_scheme = HTTPBearer(auto_error=False)


class AuthorizationGate:
    """
    Verifies the bearer token and enforces a role allow-list.

    An empty allow-list admits any authenticated caller. The decoded
    identity is stored on ``request.state.user`` and returned.

    Usage:
        @router.post("/books")
        async def create_book(identity: Identity = Depends(catalog_editors)):
            ...
    """

    def __init__(self, allowed_roles: Iterable[Role] = ()):
        self.allowed_roles = frozenset(allowed_roles)

    async def __call__(
        self,
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        settings: Settings = Depends(get_settings),
    ) -> Identity:
        if credentials is None or not credentials.credentials:
            raise UnauthenticatedError("Token requerido")

        identity = decode_access_token(
            credentials.credentials,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )

        if self.allowed_roles and identity.role not in self.allowed_roles:
            logger.warning(
                f"User {identity.id} with role {identity.role.value} denied {request.method} {request.url.path}"
            )
            raise UnauthorizedError("No autorizado")

        request.state.user = identity
        return identity


# Route policies
authenticated = AuthorizationGate()
catalog_editors = AuthorizationGate({Role.ADMIN, Role.EDITOR})
admins_only = AuthorizationGate({Role.ADMIN})
