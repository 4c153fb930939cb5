"""
BTSim Detection API Routes

Credential-risk analysis of page snapshots and model feedback.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from btsim.api.dependencies import get_detector
from btsim.models.detection import DetectionInput, RiskAssessment
from btsim.services.detection import DetectionEngine, get_recommendations

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/detection", tags=["detection"])


class FeedbackRequest(BaseModel):
    """Labelled outcome for a previously analyzed snapshot."""
    input: DetectionInput
    is_credential_entry: bool = Field(..., description="Ground-truth label")


class FeedbackResponse(BaseModel):
    accepted: bool = True
    retrained: bool
    pending_examples: int
    model_ready: bool


@router.post("/analyze", response_model=RiskAssessment)
async def analyze_snapshot(
    data: DetectionInput,
    engine: DetectionEngine = Depends(get_detector),
):
    """
    Score a page snapshot.

    Returns:
        RiskAssessment with recommendations
    """
    assessment = await engine.analyze(data)
    assessment.recommendations = get_recommendations(assessment)
    return assessment


@router.post("/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    request: FeedbackRequest,
    engine: DetectionEngine = Depends(get_detector),
):
    """Feed a labelled example to the trainable model."""
    retrained = engine.record_outcome(request.input, request.is_credential_entry)
    model = engine.model

    return FeedbackResponse(
        retrained=retrained,
        pending_examples=model.pending_examples if model else 0,
        model_ready=bool(model and model.is_ready),
    )
