"""
BTSim Events API Routes

Interaction event ingestion and per-user stats.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from btsim.api.dependencies import get_event_deduplicator, get_progression_tracker
from btsim.models.progression import SimulationEvent, UserStats
from btsim.services.progression import EventDeduplicator, ProgressionTracker
from btsim.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


class EventResponse(BaseModel):
    accepted: bool
    duplicate: bool = False
    stats: UserStats


@router.post("/events/{user_id}", response_model=EventResponse)
async def record_event(
    user_id: str,
    event: SimulationEvent,
    tracker: ProgressionTracker = Depends(get_progression_tracker),
    deduplicator: EventDeduplicator = Depends(get_event_deduplicator),
):
    """Apply an event once; redeliveries of the same id are ignored."""
    try:
        if not deduplicator.accept(f"{user_id}:{event.id}"):
            logger.info(f"Duplicate event {event.id} for {user_id} ignored")
            return EventResponse(accepted=False, duplicate=True, stats=await tracker.get_stats(user_id))

        stats = await tracker.record_event(user_id, event)
    except StorageError as e:
        logger.error(f"Failed to record event for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")

    return EventResponse(accepted=True, stats=stats)


@router.get("/stats/{user_id}", response_model=UserStats)
async def get_user_stats(
    user_id: str,
    tracker: ProgressionTracker = Depends(get_progression_tracker),
):
    """Current stats, baseline record for unknown users."""
    try:
        return await tracker.get_stats(user_id)
    except StorageError as e:
        logger.error(f"Failed to load stats for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")
