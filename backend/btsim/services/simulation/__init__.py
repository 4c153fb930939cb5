"""
BTSim Simulation Module

Cadence, content strategies and planning of phishing simulations.
"""

from .cadence import (
    CadencePolicy,
    CadenceGate,
    SessionState,
    context_factor,
    trigger_probability,
    system_clock,
)

from .strategies import (
    ContentStrategy,
    ContextEnrichedStrategy,
    LocalHeuristicStrategy,
    select_strategy,
    personalize,
)

from .planner import (
    SimulationPlanner,
    triggers_satisfied,
    compare,
)

__all__ = [
    'CadencePolicy',
    'CadenceGate',
    'SessionState',
    'context_factor',
    'trigger_probability',
    'system_clock',
    'ContentStrategy',
    'ContextEnrichedStrategy',
    'LocalHeuristicStrategy',
    'select_strategy',
    'personalize',
    'SimulationPlanner',
    'triggers_satisfied',
    'compare',
]
