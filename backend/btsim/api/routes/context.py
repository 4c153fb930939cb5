"""
BTSim Context API Routes

Store per-site context snapshots and return the aggregated analysis.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from btsim.api.dependencies import get_state_store
from btsim.models.context import Site, UserContext, ContextAnalysis
from btsim.services.context import get_context_aggregator
from btsim.services.storage import StateStore
from btsim.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/context", tags=["context"])


class ContextStoredResponse(BaseModel):
    user_id: str
    sites: List[Site]


@router.post("/{user_id}", response_model=ContextStoredResponse)
async def store_context(
    user_id: str,
    context: UserContext,
    store: StateStore = Depends(get_state_store),
):
    """Merge a site snapshot into the user's context map."""
    try:
        contexts = await store.save_context(user_id, context)
    except StorageError as e:
        logger.error(f"Failed to store context for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")

    return ContextStoredResponse(user_id=user_id, sites=list(contexts.keys()))


@router.get("/{user_id}/analysis", response_model=ContextAnalysis)
async def get_context_analysis(
    user_id: str,
    store: StateStore = Depends(get_state_store),
):
    """Aggregate everything known about a user."""
    try:
        contexts = await store.get_contexts(user_id)
    except StorageError as e:
        logger.error(f"Failed to load context for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")

    return get_context_aggregator().aggregate(contexts)
