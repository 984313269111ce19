"""LinkVault API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LinkVaultError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and workspace initialized on startup via lifespan; the sync
      engine's subscriptions are torn down on shutdown

Design Decisions:
    - Lifespan over @app.on_event
    - Error handlers live in api/error_handlers.py
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkvault.api.error_handlers import register_error_handlers
from linkvault.api.routes import (
    auth_session, folders, health, links, vault, workspace_stream,
)
from linkvault.config import get_settings
from linkvault.infrastructure.database import init_db
from linkvault.infrastructure.observability import setup_logging
from linkvault.services.workspace import init_workspace

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_auto_create:
        await db.create_schema()
    ws = init_workspace(db, recent_window_days=settings.recent_window_days)
    await ws.start()
    logger.info("LinkVault API started")
    yield
    logger.info("LinkVault API shutting down")
    await ws.stop()
    await db.dispose()


app = FastAPI(
    title="LinkVault API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth_session.router)
app.include_router(folders.router)
app.include_router(links.router)
app.include_router(vault.router)
app.include_router(workspace_stream.router)

register_error_handlers(app)
