"""
BTSim Detection Rule Base Class

Abstract base class for all credential-risk rules.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from urllib.parse import ParseResult

from btsim.models.detection import DetectionInput, RiskFactor, Severity
from btsim.utils.helpers import parse_url

logger = logging.getLogger(__name__)


@dataclass
class RuleMatch:
    """Result of a detection rule evaluation."""
    rule_id: str
    factor_type: str
    category: str
    severity: Severity
    description: str
    weight: float
    evidence: List[str] = field(default_factory=list)
    indicators: List[Dict[str, Any]] = field(default_factory=list)

    def to_factor(self) -> RiskFactor:
        """Convert to the public RiskFactor shape."""
        return RiskFactor(
            type=self.factor_type,
            severity=self.severity,
            description=self.description,
            weight=round(self.weight, 4),
        )


class DetectionRule(ABC):
    """
    Abstract base class for all detection rules.

    Each rule must define:
    - rule_id: Unique identifier (e.g., "URL-001")
    - factor_type: Factor identifier reported in RiskAssessment
    - description: Human-readable reason shown to the user
    - category: Rule category (form, url, content, behavior)
    - severity: Factor severity
    - weight: Score contribution when triggered

    Each rule must implement:
    - evaluate(): Check if rule matches and return RuleMatch or None
    """

    rule_id: str = "BASE-000"
    factor_type: str = "base"
    description: str = "Base detection rule"
    category: str = "general"
    severity: Severity = Severity.LOW
    weight: float = 0.0

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        """
        Evaluate rule against a page snapshot.

        Args:
            data: Detection input

        Returns:
            RuleMatch if rule triggered, None otherwise
        """
        pass

    def create_match(
        self,
        evidence: Optional[List[str]] = None,
        indicators: Optional[List[Dict[str, Any]]] = None,
        weight_override: Optional[float] = None,
        description_override: Optional[str] = None,
    ) -> RuleMatch:
        """
        Create a RuleMatch for this rule.

        Args:
            evidence: List of evidence strings
            indicators: Optional list of indicator dictionaries
            weight_override: Override default weight (for scaled signals)
            description_override: Override default description

        Returns:
            RuleMatch instance
        """
        return RuleMatch(
            rule_id=self.rule_id,
            factor_type=self.factor_type,
            category=self.category,
            severity=self.severity,
            description=description_override or self.description,
            weight=self.weight if weight_override is None else weight_override,
            evidence=evidence or [],
            indicators=indicators or [],
        )

    def get_page_text(self, data: DetectionInput) -> str:
        """Get combined, lower-cased title and content."""
        return f"{data.page_title} {data.page_content}".lower()

    def get_parsed_url(self, data: DetectionInput) -> Optional[ParseResult]:
        """Parsed page URL, or None when malformed."""
        return parse_url(data.url)


class RuleRegistry:
    """Registry of all detection rules, in registration order."""

    _instance = None
    _rules: List[DetectionRule] = []

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._rules = []
        return cls._instance

    def register(self, rule: DetectionRule) -> None:
        """Register a detection rule."""
        self._rules.append(rule)

    def get_all_rules(self) -> List[DetectionRule]:
        """Get all registered rules."""
        return list(self._rules)

    def get_rules_by_category(self, category: str) -> List[DetectionRule]:
        """Get rules by category."""
        return [r for r in self._rules if r.category == category]

    def clear(self) -> None:
        """Clear all registered rules."""
        self._rules = []


# Global registry
rule_registry = RuleRegistry()


def register_rule(rule_class: type) -> type:
    """Decorator to register a rule class."""
    rule_registry.register(rule_class())
    return rule_class
