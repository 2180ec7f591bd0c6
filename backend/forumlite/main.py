"""
ForumLite Composer Backend.

FastAPI application serving the forum composer:
paste conversion, toolbar formatting and post previews.
"""

import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from loguru import logger

from forumlite.api.v1 import router as api_v1_router
from forumlite.core.config import settings
from forumlite.modules.composer.render import get_post_renderer

COMPOSER_PREFIX = f"{settings.api_v1_prefix}/composer"


def configure_logging() -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if settings.debug else settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the shared renderer before the first preview request."""
    configure_logging()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    app.state.renderer = get_post_renderer()
    logger.info(
        f"Composer ready (max paste {settings.composer_max_paste_bytes} bytes, "
        f"image schemes {settings.composer_allowed_image_schemes})"
    )

    yield

    logger.info(f"{settings.app_name} stopped")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    summary="Composer backend for the ForumLite discussion board",
    description=(
        "Converts rich-text clipboard HTML to ForumLite markdown, applies "
        "toolbar edits to the composer buffer and renders sanitized post "
        "previews with mentions and video embeds."
    ),
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
)

# The composer is stateless and cookie-free; browsers only need GET and POST.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(api_v1_router, prefix=settings.api_v1_prefix)


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    """Liveness check; reports whether the preview renderer is loaded."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "renderer": "ready" if getattr(app.state, "renderer", None) else "cold",
    }


@app.get("/", tags=["System"])
async def root() -> dict:
    """Service description with the composer entry points."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": app.docs_url,
        "api": settings.api_v1_prefix,
        "endpoints": {
            "paste": f"{COMPOSER_PREFIX}/paste",
            "format": f"{COMPOSER_PREFIX}/format",
            "preview": f"{COMPOSER_PREFIX}/preview",
            "mentions": f"{COMPOSER_PREFIX}/mentions",
        },
    }
