"""Versioned API router."""

from fastapi import APIRouter

from clinical_capacity.api.rate_limits import DEFAULT_RATE_LIMIT

from . import auth, clinical_capacity, health, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(
    users.router, prefix="/users", tags=["users"], dependencies=[DEFAULT_RATE_LIMIT]
)
router.include_router(
    clinical_capacity.router, tags=["clinical-capacity"], dependencies=[DEFAULT_RATE_LIMIT]
)

__all__ = ["router"]
