"""API routers."""
from fastapi import APIRouter

from tapvote.routers import devices, follow_up, health, surveys, tags, votes

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(surveys.router, prefix="/surveys", tags=["surveys"])
router.include_router(votes.router, prefix="/surveys", tags=["votes"])
router.include_router(follow_up.router, prefix="/surveys", tags=["follow-up"])
router.include_router(tags.router, prefix="/tags", tags=["tags"])
router.include_router(devices.router, prefix="/devices", tags=["devices"])

__all__ = [
    "router",
    "devices",
    "follow_up",
    "health",
    "surveys",
    "tags",
    "votes",
]
