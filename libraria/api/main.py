"""
Libraria API

Application factory, lifespan and the unversioned system routes.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from sqlalchemy import text

from libraria import __version__
from .schemas import HealthResponse
from .routes import users, books, reservations
from .middleware import (
    LoggingConfig,
    get_cors_config,
    setup_cors,
    setup_exception_handlers,
    setup_logging,
)
from .dependencies import (
    DEFAULT_JWT_SECRET,
    Settings,
    create_tables,
    dispose_database,
    get_engine,
    get_settings,
    init_database,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the database and create the schema; dispose the engine on shutdown."""
    settings: Settings = app.state.settings
    logger.info(f"Starting Libraria {__version__} ({settings.environment})")

    if settings.jwt_secret == DEFAULT_JWT_SECRET and settings.environment != "development":
        logger.warning("JWT_SECRET is not set; tokens are signed with the development secret")

    init_database(settings)
    try:
        await create_tables()
        logger.info(f"Database ready at {settings.database_url.split('@')[-1]}")
        yield
    finally:
        await dispose_database()
        logger.info("Libraria stopped")


async def _database_status() -> str:
    engine = get_engine()
    if engine is None:
        return "not_initialized"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health probe failed: {e}")
        return f"unhealthy: {e}"
    return "healthy"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Application settings. If None, loads from environment.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Libraria",
        description="Library catalog, user accounts and book reservations.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Last added runs outermost: CORS, then access log, then handlers
    setup_exception_handlers(app)
    setup_logging(
        app,
        config=LoggingConfig(log_request_body=settings.debug),
        structured=settings.environment != "development",
    )
    setup_cors(app, config=get_cors_config(settings.environment))

    for module in (users, books, reservations):
        app.include_router(module.router, prefix=API_PREFIX)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": "Libraria",
            "version": __version__,
            "status": "running",
            "msg": "Biblioteca - API funcionando",
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Report whether the database answers."""
        database = await _database_status()
        return HealthResponse(
            status="healthy" if database == "healthy" else "degraded",
            version=__version__,
            components={"database": database},
        )

    return app


app = create_app()


def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "libraria.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
