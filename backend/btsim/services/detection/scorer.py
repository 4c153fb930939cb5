"""
BTSim Risk Scorer

Aggregates rule matches into a confidence, a ranked factor list and a verdict.
"""

import logging
from typing import List

from btsim.models.detection import RiskFactor, SEVERITY_RANK
from btsim.services.detection.rules.base import RuleMatch
from btsim.utils.constants import DEFAULT_DETECTION_THRESHOLD, MAX_RISK_FACTORS
from btsim.utils.helpers import clamp

logger = logging.getLogger(__name__)


class RiskScorer:
    """
    Calculate confidence and verdict from triggered rules.
    """

    def __init__(self, threshold: float = DEFAULT_DETECTION_THRESHOLD, max_factors: int = MAX_RISK_FACTORS):
        self.threshold = threshold
        self.max_factors = max_factors

    def calculate_score(self, matches: List[RuleMatch]) -> float:
        """
        Additive score of all triggered rules.

        Args:
            matches: List of triggered rule matches

        Returns:
            Score clamped to [0, 1]
        """
        if not matches:
            return 0.0

        total = sum(match.weight for match in matches)
        return round(clamp(total, 0.0, 1.0), 4)

    def rank_factors(self, matches: List[RuleMatch]) -> List[RiskFactor]:
        """
        Highest severity first, discovery order within a severity, truncated.

        Args:
            matches: Triggered matches in discovery order

        Returns:
            At most max_factors RiskFactor entries
        """
        # sorted() is stable, so discovery order survives within a severity
        ranked = sorted(matches, key=lambda m: SEVERITY_RANK[m.severity], reverse=True)
        return [m.to_factor() for m in ranked[:self.max_factors]]

    def get_verdict(self, has_password_field: bool, confidence: float) -> bool:
        """Credential entry only with a password field AND confidence above threshold."""
        return bool(has_password_field) and confidence > self.threshold
