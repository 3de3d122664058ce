"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text

from .config import settings
from .database import engine
from .logging_config import configure_logging, configure_sqlalchemy_logging
from .routers import (
    admin_router,
    advertisements_router,
    articles_router,
    businesses_router,
    categories_router,
    galleries_router,
    health_router,
    media_router,
    pages_router,
    profiles_router,
    rss_router,
    tags_router,
)

configure_logging(log_level=settings.log_level, json_logs=settings.json_logs)
configure_sqlalchemy_logging(settings.sqlalchemy_log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    # The service starts without a database; /health reports degraded
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        logger.warning(f"Database connection failed: {e}")

    yield

    logger.info("Shutting down application")
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# When CORS_ALLOW_ALL=true, allows all origins (["*"])
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check (no /api/v1 prefix)
app.include_router(health_router)

# Public content
app.include_router(articles_router)
app.include_router(businesses_router)
app.include_router(advertisements_router)
app.include_router(categories_router)
app.include_router(tags_router)
app.include_router(pages_router)

# Accounts and uploads
app.include_router(profiles_router)
app.include_router(media_router)
app.include_router(galleries_router)

# Staff operations
app.include_router(rss_router)
app.include_router(admin_router)

# Uploaded files
Path(settings.media_base_path).mkdir(parents=True, exist_ok=True)
app.mount(
    settings.media_url_prefix,
    StaticFiles(directory=settings.media_base_path),
    name="media",
)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": f"{settings.app_name} API"}
