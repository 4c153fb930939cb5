"""
BTSim Behavioral Detection Rules
"""

from typing import Optional

from btsim.models.detection import DetectionInput, Severity

from .base import DetectionRule, RuleMatch, register_rule


@register_rule
class RushedEntryRule(DetectionRule):
    """Fast form completion with little time on page."""

    rule_id = "BEHAVIOR-001"
    factor_type = "rushed_behavior"
    description = "Quick form entry detected"
    category = "behavior"
    severity = Severity.LOW
    weight = 0.05

    MAX_TIME_ON_PAGE_MS = 3000
    MIN_KEYSTROKES = 10

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        behavior = data.user_behavior
        if behavior.time_on_page < self.MAX_TIME_ON_PAGE_MS and behavior.keystrokes > self.MIN_KEYSTROKES:
            return self.create_match(
                evidence=[f"{behavior.keystrokes} keystrokes in {behavior.time_on_page} ms"]
            )
        return None


@register_rule
class LowInteractionRule(DetectionRule):
    """Typing with almost no pointer movement."""

    rule_id = "BEHAVIOR-002"
    factor_type = "low_interaction"
    description = "Unusually low mouse interaction"
    category = "behavior"
    severity = Severity.LOW
    weight = 0.05

    MAX_MOUSE_MOVEMENTS = 5
    MIN_KEYSTROKES = 20

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        behavior = data.user_behavior
        if behavior.mouse_movements < self.MAX_MOUSE_MOVEMENTS and behavior.keystrokes > self.MIN_KEYSTROKES:
            return self.create_match(
                evidence=[f"{behavior.mouse_movements} pointer moves, {behavior.keystrokes} keystrokes"]
            )
        return None
