"""
BTSim Simulation Cadence

Per-session pacing of simulations: minimum spacing, a per-session cap and a
probability draw that grows with how much context is known about the user.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

from btsim.models.context import UserContext
from btsim.utils import constants

logger = logging.getLogger(__name__)


Clock = Callable[[], int]


def system_clock() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class CadencePolicy:
    max_simulations_per_session: int = constants.MAX_SIMULATIONS_PER_SESSION
    min_interval_ms: int = constants.MIN_SIMULATION_INTERVAL_MS


@dataclass
class SessionState:
    """Cadence bookkeeping for one user session."""
    last_simulation_at: Optional[int] = None
    last_evaluated_at: Optional[int] = None
    simulation_count: int = 0

    def record_simulation(self, now: int) -> None:
        self.simulation_count += 1
        self.last_simulation_at = now


def context_factor(context: Optional[UserContext]) -> float:
    """0.1 per known personal attribute, capped at 0.4."""
    if context is None:
        return 0.0

    known = [
        bool(context.username),
        bool(context.email),
        bool(context.organization),
        bool(context.connections),
        bool(context.recent_activity),
    ]
    factor = constants.TRIGGER_CONTEXT_FACTOR_STEP * sum(known)
    return min(factor, constants.TRIGGER_CONTEXT_FACTOR_MAX)


def trigger_probability(context: Optional[UserContext]) -> float:
    return min(
        constants.TRIGGER_PROBABILITY_BASE + context_factor(context),
        constants.TRIGGER_PROBABILITY_MAX,
    )


class CadenceGate:
    """
    Decides whether a simulation may be shown now.

    Every probability draw stamps the session, so the minimum interval also
    separates consecutive draws, not only consecutive simulations.
    """

    def __init__(
        self,
        policy: Optional[CadencePolicy] = None,
        state: Optional[SessionState] = None,
        clock: Clock = system_clock,
        rng: Optional[random.Random] = None,
    ):
        self.policy = policy or CadencePolicy()
        self.state = state or SessionState()
        self.clock = clock
        self.rng = rng or random.Random()

    def _within_interval(self, now: int, since: Optional[int]) -> bool:
        return since is not None and now - since < self.policy.min_interval_ms

    def should_trigger(self, context: Optional[UserContext] = None) -> bool:
        now = self.clock()
        state = self.state

        if state.simulation_count >= self.policy.max_simulations_per_session:
            logger.debug("Session cap reached")
            return False

        if self._within_interval(now, state.last_simulation_at):
            return False

        if self._within_interval(now, state.last_evaluated_at):
            return False

        state.last_evaluated_at = now
        return self.rng.random() < trigger_probability(context)
