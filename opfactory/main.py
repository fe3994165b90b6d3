"""Operation Factory API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map OperationFactoryError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from opfactory.api.error_handlers import register_error_handlers
from opfactory.api.routes import enrollments, health, operations
from opfactory.config import get_settings
from opfactory.infrastructure import database
from opfactory.infrastructure.observability import setup_logging
from opfactory.infrastructure.roster_cache import roster_cache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    roster_cache.ttl_seconds = settings.roster_cache_ttl_seconds
    logger.info("Operation Factory API started")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("Operation Factory API shutting down")


app = FastAPI(
    title="Operation Factory API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(operations.router)
app.include_router(enrollments.router)

register_error_handlers(app)
