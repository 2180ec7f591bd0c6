"""
API Version 1 Router.

Combines all API endpoints under /api/v1 prefix.
"""

from fastapi import APIRouter

from forumlite.api.v1.endpoints import composer

router = APIRouter()

# Include endpoint routers
router.include_router(composer.router, prefix="/composer", tags=["Composer"])
