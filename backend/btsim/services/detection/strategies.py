"""
BTSim Scoring Strategies

Interchangeable scoring steps for the detection engine: the additive rule
heuristic and the trainable model. Both return a confidence in [0, 1].
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from btsim.models.detection import DetectionInput, DetectionMethod
from btsim.services.detection.model import CredentialModel
from btsim.services.detection.rules.base import RuleMatch
from btsim.services.detection.scorer import RiskScorer
from btsim.utils.constants import MODEL_TIMEOUT_SECONDS
from btsim.utils.exceptions import ModelUnavailableError
from btsim.utils.helpers import clamp

logger = logging.getLogger(__name__)


class ScoringStrategy(ABC):
    """Scoring step of the detection pipeline."""

    method: DetectionMethod = DetectionMethod.HEURISTIC

    def is_available(self) -> bool:
        return True

    @abstractmethod
    async def score(self, data: DetectionInput, matches: List[RuleMatch]) -> float:
        """
        Compute the confidence for a snapshot.

        Args:
            data: Detection input
            matches: Rule matches already collected for this input

        Returns:
            Confidence in [0, 1]
        """
        pass


class HeuristicScoringStrategy(ScoringStrategy):
    """Additive weights of the triggered rules."""

    method = DetectionMethod.HEURISTIC

    def __init__(self, scorer: Optional[RiskScorer] = None):
        self.scorer = scorer or RiskScorer()

    async def score(self, data: DetectionInput, matches: List[RuleMatch]) -> float:
        return self.scorer.calculate_score(matches)


class ModelScoringStrategy(ScoringStrategy):
    """
    Trainable model probability, bounded by a timeout.

    Inference runs in a worker thread so the event loop never blocks.
    """

    method = DetectionMethod.MODEL

    def __init__(self, model: CredentialModel, timeout_seconds: float = MODEL_TIMEOUT_SECONDS):
        self.model = model
        self.timeout_seconds = timeout_seconds

    def is_available(self) -> bool:
        return self.model is not None and self.model.is_ready

    async def score(self, data: DetectionInput, matches: List[RuleMatch]) -> float:
        if not self.is_available():
            raise ModelUnavailableError("Credential model is not ready")

        probability = await asyncio.wait_for(
            asyncio.to_thread(self.model.predict_proba, data),
            timeout=self.timeout_seconds,
        )
        return round(clamp(float(probability), 0.0, 1.0), 4)
