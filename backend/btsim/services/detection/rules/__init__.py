"""
BTSim Detection Rules

All detection rules are automatically registered via the @register_rule decorator.
Import order is discovery order for factor ranking ties.
"""

from .base import (
    DetectionRule,
    RuleMatch,
    RuleRegistry,
    rule_registry,
    register_rule,
)

# Import all rule modules to trigger registration
from . import form
from . import url
from . import content
from . import behavior


def get_all_rules():
    """Get all registered detection rules."""
    return rule_registry.get_all_rules()


def get_rules_by_category(category: str):
    """Get rules by category."""
    return rule_registry.get_rules_by_category(category)


__all__ = [
    'DetectionRule',
    'RuleMatch',
    'RuleRegistry',
    'rule_registry',
    'register_rule',
    'get_all_rules',
    'get_rules_by_category',
]
