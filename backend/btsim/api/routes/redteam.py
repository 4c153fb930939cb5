"""
BTSim Red Team API Routes

Operator-controlled, deterministic simulations.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, Field

from btsim.api.dependencies import get_planner, verify_operator
from btsim.models.context import Site
from btsim.models.simulation import PhishingSimulation, TriggerCondition
from btsim.utils.exceptions import UnauthorizedOperatorError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/redteam", tags=["redteam"])


class RedTeamRequest(BaseModel):
    target_identity: str = Field(..., description="Name or address used in the greeting")
    vector: str = Field(..., description="Operator's attack vector label")
    payload: Optional[str] = Field(None, description="Literal message text")
    site: Site = Site.GMAIL
    session_id: Optional[str] = Field(None, description="Session whose planner tracks the simulation")
    trigger_conditions: List[TriggerCondition] = Field(default_factory=list)


@router.post("/simulations", response_model=PhishingSimulation)
async def create_red_team_simulation(
    request: RedTeamRequest,
    x_api_key: Optional[str] = Header(None),
):
    """Plan an exact, reproducible simulation for an authorized operator."""
    try:
        verify_operator(x_api_key)
    except UnauthorizedOperatorError as e:
        logger.warning(f"Rejected red-team request: {e.message}")
        raise HTTPException(status_code=403, detail=e.message)

    planner = get_planner(request.session_id or request.target_identity)
    try:
        return planner.plan_red_team(
            request.target_identity,
            request.vector,
            request.payload,
            trigger_conditions=request.trigger_conditions,
            site=request.site,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)
