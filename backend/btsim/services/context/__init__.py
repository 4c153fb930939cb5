"""
BTSim Context Module

Aggregation of per-site user signals.
"""

from .aggregator import (
    ContextAggregator,
    get_context_aggregator,
    SITE_ATTACK_VECTORS,
    HIGH_IMPACT_SITES,
)

__all__ = [
    'ContextAggregator',
    'get_context_aggregator',
    'SITE_ATTACK_VECTORS',
    'HIGH_IMPACT_SITES',
]
