"""
BTSim Form Detection Rules

Rules over the form field descriptors present on the page.
"""

from typing import Optional

from btsim.models.detection import DetectionInput, Severity
from btsim.utils.constants import USERNAME_NAME_PATTERNS
from btsim.utils.helpers import matches_any

from .base import DetectionRule, RuleMatch, register_rule


def is_username_field(field) -> bool:
    """Email inputs or inputs whose name looks like an account identifier."""
    return field.type == "email" or (
        not field.is_password and matches_any(USERNAME_NAME_PATTERNS, field.name)
    )


@register_rule
class PasswordFieldRule(DetectionRule):
    """Detect a password-capable input."""

    rule_id = "FORM-001"
    factor_type = "password_field"
    description = "Password field detected"
    category = "form"
    severity = Severity.HIGH
    weight = 0.25

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        password_fields = [f.name for f in data.form_fields if f.is_password]
        if not password_fields:
            return None

        return self.create_match(
            evidence=[f"Password-capable field: {name or '(unnamed)'}" for name in password_fields[:3]],
            indicators=[{'type': 'password_field', 'count': len(password_fields)}],
        )


@register_rule
class UsernameFieldRule(DetectionRule):
    """Detect an account identifier input alongside the form."""

    rule_id = "FORM-002"
    factor_type = "username_field"
    description = "Username or email field detected"
    category = "form"
    severity = Severity.LOW
    weight = 0.1

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        matches = [f.name for f in data.form_fields if is_username_field(f)]
        if not matches:
            return None

        return self.create_match(evidence=[f"Identifier field: {name or '(unnamed)'}" for name in matches[:3]])


@register_rule
class HiddenFieldsRule(DetectionRule):
    """Detect forms stuffed with hidden inputs."""

    rule_id = "FORM-003"
    factor_type = "hidden_fields"
    description = "Multiple hidden form fields detected"
    category = "form"
    severity = Severity.MEDIUM
    weight = 0.1

    HIDDEN_FIELD_LIMIT = 2

    async def evaluate(self, data: DetectionInput) -> Optional[RuleMatch]:
        hidden = sum(1 for f in data.form_fields if f.is_hidden)
        if hidden <= self.HIDDEN_FIELD_LIMIT:
            return None

        return self.create_match(evidence=[f"{hidden} hidden fields"])
