"""
BTSim Page Content Detection Rules

Rules over page title and text: pressure language, security-keyword density
and misspelled security terms.
"""

from typing import Optional

from btsim.models.detection import DetectionInput, Severity
from btsim.utils.constants import (
    URGENCY_KEYWORDS,
    SECURITY_KEYWORDS,
    SECURITY_KEYWORD_BASELINE,
    COMMON_MISSPELLINGS,
)

from .base import DetectionRule, RuleMatch, register_rule


@register_rule
class UrgencyLanguageRule(DetectionRule):
    """Urgent or threatening language, scaled by keyword hits."""

    rule_id = "CONTENT-001"
    factor_type = "urgency_language"
    description = "Page uses urgent or threatening language"
    category = "content"
    severity = Severity.MEDIUM
    weight = 0.15

    PER_KEYWORD = 0.05

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        text = self.get_page_text(data)
        hits = [k for k in URGENCY_KEYWORDS if k in text]
        if not hits:
            return None

        return self.create_match(
            evidence=[f"Urgency keywords: {', '.join(hits)}"],
            indicators=[{'type': 'urgency', 'keywords': hits}],
            weight_override=min(len(hits) * self.PER_KEYWORD, self.weight),
        )


@register_rule
class SecurityLanguageRule(DetectionRule):
    """Security vocabulary above a small baseline."""

    rule_id = "CONTENT-002"
    factor_type = "security_language"
    description = "Page leans heavily on security wording"
    category = "content"
    severity = Severity.LOW
    weight = 0.1

    PER_KEYWORD = 0.03

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        text = self.get_page_text(data)
        hits = [k for k in SECURITY_KEYWORDS if k in text]
        if len(hits) <= SECURITY_KEYWORD_BASELINE:
            return None

        excess = len(hits) - SECURITY_KEYWORD_BASELINE
        return self.create_match(
            evidence=[f"Security keywords: {', '.join(hits)}"],
            weight_override=min(excess * self.PER_KEYWORD, self.weight),
        )


@register_rule
class SuspiciousSpellingRule(DetectionRule):
    """Misspelled security-relevant terms."""

    rule_id = "CONTENT-003"
    factor_type = "suspicious_spelling"
    description = "Possible spelling errors detected"
    category = "content"
    severity = Severity.LOW
    weight = 0.05

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        text = self.get_page_text(data)
        typo = next((t for t in COMMON_MISSPELLINGS if t in text), None)
        if typo is None:
            return None

        return self.create_match(evidence=[f"Misspelling: {typo}"])
