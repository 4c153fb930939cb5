"""
BTSim Simulation API Routes

Cadence evaluation, planning and revocation of training simulations.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from btsim.api.dependencies import find_planner, get_planner, get_progression_tracker, get_state_store
from btsim.models.context import Site, UserContext
from btsim.models.progression import SimulationEvent
from btsim.models.simulation import Difficulty, PhishingSimulation
from btsim.services.context import get_context_aggregator
from btsim.services.progression import ProgressionTracker
from btsim.services.storage import StateStore
from btsim.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/simulations", tags=["simulations"])


class PlanRequest(BaseModel):
    site: Site = Site.UNKNOWN
    context: Optional[UserContext] = Field(None, description="Fresh snapshot; stored context is used when omitted")
    difficulty: Optional[Difficulty] = Field(None, description="Defaults to the user's current level")


class EvaluateResponse(BaseModel):
    triggered: bool
    simulation: Optional[PhishingSimulation] = None


async def _resolve(user_id: str, request: PlanRequest, store: StateStore, tracker: ProgressionTracker):
    """
    Context snapshot, aggregated analysis and difficulty for a request.

    Raises:
        HTTPException: 503 when the state store fails
    """
    try:
        contexts = await store.get_contexts(user_id)
        stats = await tracker.get_stats(user_id) if request.difficulty is None else None
    except StorageError as e:
        logger.error(f"Failed to load state for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Storage unavailable")

    if request.context is not None:
        contexts[request.site] = request.context

    context = contexts.get(request.site)
    analysis = get_context_aggregator().aggregate(contexts)

    difficulty = request.difficulty or stats.difficulty_progression.current_level

    return context, analysis, difficulty


@router.post("/{user_id}/evaluate", response_model=EvaluateResponse)
async def evaluate_simulation(
    user_id: str,
    request: PlanRequest,
    store: StateStore = Depends(get_state_store),
    tracker: ProgressionTracker = Depends(get_progression_tracker),
):
    """Plan a simulation only if the session cadence allows one now."""
    planner = get_planner(user_id)
    context, analysis, difficulty = await _resolve(user_id, request, store, tracker)

    if not planner.should_trigger(request.site, context):
        return EvaluateResponse(triggered=False)

    simulation = planner.plan(request.site, context, difficulty, analysis)
    return EvaluateResponse(triggered=True, simulation=simulation)


@router.post("/{user_id}/plan", response_model=PhishingSimulation)
async def plan_simulation(
    user_id: str,
    request: PlanRequest,
    store: StateStore = Depends(get_state_store),
    tracker: ProgressionTracker = Depends(get_progression_tracker),
):
    """Plan a simulation regardless of cadence."""
    planner = get_planner(user_id)
    context, analysis, difficulty = await _resolve(user_id, request, store, tracker)
    return planner.plan(request.site, context, difficulty, analysis)


@router.delete("/{user_id}/{simulation_id}", response_model=SimulationEvent)
async def revoke_simulation(user_id: str, simulation_id: str):
    """Withdraw a pending simulation."""
    planner = find_planner(user_id)
    event = planner.revoke(simulation_id) if planner else None
    if event is None:
        raise HTTPException(status_code=404, detail=f"Simulation {simulation_id} not found")
    return event
