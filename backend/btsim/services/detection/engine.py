"""
BTSim Detection Engine

Main detection engine that runs all credential-risk rules, scores the result
with the best available strategy and builds the RiskAssessment.
"""

import logging
import asyncio
from typing import List, Optional, Dict, Any

from btsim.models.detection import (
    DetectionInput,
    DetectionMethod,
    FormField,
    RiskAssessment,
)
from btsim.services.detection.rules import rule_registry, RuleMatch
from btsim.services.detection.rules.form import is_username_field
from btsim.services.detection.scorer import RiskScorer
from btsim.services.detection.model import CredentialModel, get_credential_model
from btsim.services.detection.strategies import (
    ScoringStrategy,
    HeuristicScoringStrategy,
    ModelScoringStrategy,
)
from btsim.utils.constants import DEFAULT_DETECTION_THRESHOLD, MODEL_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class DetectionEngine:
    """
    Main detection engine.

    Runs all detection rules against a page snapshot, scores them with the
    model when one is available and the heuristic otherwise. Detection never
    fails outright: rule errors are skipped and model errors fall back.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_DETECTION_THRESHOLD,
        model: Optional[CredentialModel] = None,
        model_enabled: bool = True,
        model_timeout_seconds: float = MODEL_TIMEOUT_SECONDS,
    ):
        """
        Initialize detection engine with all rules.

        Args:
            threshold: Confidence above which a password page is flagged
            model: Trainable model (None disables the model path)
            model_enabled: Feature flag for the model path
            model_timeout_seconds: Bound on model inference latency
        """
        self.scorer = RiskScorer(threshold=threshold)
        self.heuristic = HeuristicScoringStrategy(self.scorer)
        self.model = model
        self.model_strategy: Optional[ScoringStrategy] = (
            ModelScoringStrategy(model, model_timeout_seconds) if model is not None and model_enabled else None
        )
        self._rules = None  # Lazy load

    @property
    def threshold(self) -> float:
        return self.scorer.threshold

    @property
    def rules(self):
        """Get all registered rules (lazy loaded)."""
        if self._rules is None:
            self._rules = rule_registry.get_all_rules()
        return self._rules

    async def analyze(self, data: DetectionInput) -> RiskAssessment:
        """
        Score a snapshot for credential-theft risk.

        Args:
            data: Detection input

        Returns:
            RiskAssessment with verdict, confidence and ranked factors
        """
        matches = await self.run_rules(data)
        confidence, method = await self._score(data, matches)

        has_password = data.has_password_field
        assessment = RiskAssessment(
            is_credential_entry=self.scorer.get_verdict(has_password, confidence),
            confidence=confidence,
            risk_factors=self.scorer.rank_factors(matches),
            detection_method=method,
        )

        logger.info(
            f"Detection complete: confidence={confidence}, method={method.value}, "
            f"rules_triggered={len(matches)}, verdict={assessment.is_credential_entry}"
        )
        return assessment

    async def run_rules(self, data: DetectionInput) -> List[RuleMatch]:
        """
        Run all rules concurrently, preserving registration order.

        Args:
            data: Detection input

        Returns:
            Triggered matches in discovery order
        """
        results = await asyncio.gather(
            *(self._run_rule(rule, data) for rule in self.rules),
            return_exceptions=True,
        )

        matches: List[RuleMatch] = []
        for rule, result in zip(self.rules, results):
            if isinstance(result, Exception):
                logger.warning(f"Rule {rule.rule_id} failed: {result}")
                continue
            if result is not None:
                matches.append(result)
        return matches

    async def _run_rule(self, rule, data: DetectionInput) -> Optional[RuleMatch]:
        try:
            return await rule.evaluate(data)
        except Exception as e:
            logger.error(f"Error in rule {rule.rule_id}: {e}")
            raise

    async def _score(self, data: DetectionInput, matches: List[RuleMatch]):
        """Model score when available, heuristic otherwise or on any model failure."""
        if self.model_strategy is not None and self.model_strategy.is_available():
            try:
                confidence = await self.model_strategy.score(data, matches)
                return confidence, DetectionMethod.MODEL
            except asyncio.TimeoutError:
                logger.warning("Model scoring timed out, falling back to heuristic")
            except Exception as e:
                logger.warning(f"Model scoring failed, falling back to heuristic: {e}")

        confidence = await self.heuristic.score(data, matches)
        return confidence, DetectionMethod.HEURISTIC

    def record_outcome(self, data: DetectionInput, is_credential_entry: bool) -> bool:
        """
        Feed a labelled outcome to the model.

        Returns:
            True if the model retrained
        """
        if self.model is None:
            return False
        return self.model.add_training_example(data, is_credential_entry)

    @staticmethod
    def is_login_form(fields: List[FormField]) -> bool:
        """A password field together with an identifier field."""
        has_password = any(f.is_password for f in fields)
        has_username = any(is_username_field(f) for f in fields)
        return has_password and has_username

    def get_rule_summary(self) -> Dict[str, Any]:
        """
        Get summary of all registered rules.

        Returns:
            Dictionary with rule counts by category and the model status
        """
        summary = {
            'total_rules': len(self.rules),
            'by_category': {},
            'threshold': self.threshold,
            'model_ready': bool(self.model_strategy and self.model_strategy.is_available()),
        }

        for rule in self.rules:
            summary['by_category'][rule.category] = summary['by_category'].get(rule.category, 0) + 1

        return summary


# Singleton instance
_detection_engine: Optional[DetectionEngine] = None


def get_detection_engine() -> DetectionEngine:
    """Get the detection engine singleton, configured from settings."""
    global _detection_engine
    if _detection_engine is None:
        from btsim.config import get_settings
        settings = get_settings()
        model = get_credential_model()
        model.retrain_threshold = settings.model_retrain_threshold
        _detection_engine = DetectionEngine(
            threshold=settings.detection_threshold,
            model=model,
            model_enabled=settings.model_enabled,
            model_timeout_seconds=settings.model_timeout_seconds,
        )
    return _detection_engine


def reset_detection_engine() -> None:
    """Drop the singleton so the next call re-reads settings."""
    global _detection_engine
    _detection_engine = None


async def analyze_page(data: DetectionInput) -> RiskAssessment:
    """
    Convenience function to analyze a page snapshot.

    Args:
        data: Detection input

    Returns:
        RiskAssessment
    """
    engine = get_detection_engine()
    return await engine.analyze(data)
