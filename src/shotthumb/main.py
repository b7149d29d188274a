"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shotthumb.api.routes import router
from shotthumb.config import get_settings
from shotthumb.imaging.geometry import MAX_THUMBNAIL_HEIGHT, MAX_THUMBNAIL_WIDTH
from shotthumb.imaging.pool import ThumbnailPool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting ShotThumb (box=%sx%s, max_concurrent=%s, max_image_pixels=%s)",
        MAX_THUMBNAIL_WIDTH,
        MAX_THUMBNAIL_HEIGHT,
        settings.max_concurrent,
        settings.max_image_pixels,
    )

    thumbnail_pool = ThumbnailPool(settings)
    app.state.thumbnail_pool = thumbnail_pool

    logger.info("ShotThumb ready")
    yield

    logger.info("Shutting down ShotThumb")
    thumbnail_pool.shutdown()
    logger.info("ShotThumb shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="ShotThumb",
        description="Thumbnail generation for screenshot previews",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()
