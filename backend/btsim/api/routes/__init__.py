"""
BTSim API Routes

All API route modules.
"""

from fastapi import APIRouter

from .health import router as health_router
from .context import router as context_router
from .detection import router as detection_router
from .simulations import router as simulations_router
from .redteam import router as redteam_router
from .events import router as events_router


def get_api_router() -> APIRouter:
    """Create and return the main API router."""
    api_router = APIRouter(prefix="/api/v1")

    api_router.include_router(health_router)
    api_router.include_router(context_router)
    api_router.include_router(detection_router)
    api_router.include_router(simulations_router)
    api_router.include_router(redteam_router)
    api_router.include_router(events_router)

    return api_router


__all__ = [
    'get_api_router',
    'health_router',
    'context_router',
    'detection_router',
    'simulations_router',
    'redteam_router',
    'events_router',
]
