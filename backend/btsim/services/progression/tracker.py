"""
BTSim Progression Tracker

Folds simulation and detection events into per-user UserStats: counters,
clamped risk score, detection-time running mean, streaks and difficulty.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Callable, Dict, Optional

from btsim.models.progression import (
    DifficultyProgression,
    EventKind,
    SimulationEvent,
    UserStats,
)
from btsim.models.simulation import Difficulty, DIFFICULTY_ORDER
from btsim.services.storage import StateStore, InMemoryStateStore
from btsim.utils import constants
from btsim.utils.exceptions import ConfigurationError
from btsim.utils.helpers import clamp, now_ms

logger = logging.getLogger(__name__)


SUCCESS_EVENTS = {EventKind.SIMULATION_DETECTED, EventKind.REPORTED_PHISHING}
FAILURE_EVENTS = {EventKind.LINK_CLICKED, EventKind.CREDENTIAL_ENTERED}


# =============================================================================
# LEVEL POLICIES
# =============================================================================

class LevelPolicy(ABC):
    """Decides the next difficulty level from the updated progression."""

    name: str = "base"

    @abstractmethod
    def next_level(self, progression: DifficultyProgression) -> Difficulty:
        pass


class FixedLevelPolicy(LevelPolicy):
    """Never changes the level."""

    name = "fixed"

    def next_level(self, progression: DifficultyProgression) -> Difficulty:
        return progression.current_level


class StreakLevelPolicy(LevelPolicy):
    """
    Promote after a run of detections, demote after a run of compromises.

    The level moves one step at a time and stays within easy..expert.
    """

    name = "streak"

    def __init__(self, promote_after: int = 3, demote_after: int = 2):
        self.promote_after = promote_after
        self.demote_after = demote_after

    def next_level(self, progression: DifficultyProgression) -> Difficulty:
        index = DIFFICULTY_ORDER.index(progression.current_level)

        if progression.consecutive_successes >= self.promote_after:
            index = min(index + 1, len(DIFFICULTY_ORDER) - 1)
        elif progression.consecutive_failures >= self.demote_after:
            index = max(index - 1, 0)

        return DIFFICULTY_ORDER[index]


LEVEL_POLICIES = {
    FixedLevelPolicy.name: FixedLevelPolicy,
    StreakLevelPolicy.name: StreakLevelPolicy,
}


def get_level_policy(name: str) -> LevelPolicy:
    """
    Build a level policy by name.

    Raises:
        ConfigurationError: if the name is unknown
    """
    policy_cls = LEVEL_POLICIES.get(name.lower())
    if policy_cls is None:
        raise ConfigurationError(f"Unknown level policy: {name}")
    return policy_cls()


# =============================================================================
# DEDUPLICATION
# =============================================================================

class EventDeduplicator:
    """
    Remembers recently accepted event ids.

    Bounded: the oldest ids are forgotten once the window is full.
    """

    def __init__(self, window: int = 10000):
        self.window = window
        self._seen: "OrderedDict[str, None]" = OrderedDict()

    def accept(self, event_id: str) -> bool:
        """True the first time an id is seen, False for duplicates."""
        if event_id in self._seen:
            self._seen.move_to_end(event_id)
            return False

        self._seen[event_id] = None
        while len(self._seen) > self.window:
            self._seen.popitem(last=False)
        return True

    def __len__(self) -> int:
        return len(self._seen)


# =============================================================================
# TRACKER
# =============================================================================

class ProgressionTracker:
    """
    Applies events to UserStats.

    `apply_event` is pure; `record_event` loads, applies and persists under a
    per-user lock so concurrent events for one user are serialised.
    """

    def __init__(
        self,
        store: Optional[StateStore] = None,
        level_policy: Optional[LevelPolicy] = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store or InMemoryStateStore()
        self.level_policy = level_policy or FixedLevelPolicy()
        self.clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}

    @staticmethod
    def new_stats(user_id: str) -> UserStats:
        """Fresh record: baseline risk, level easy."""
        return UserStats(user_id=user_id, risk_score=constants.BASELINE_RISK_SCORE)

    def apply_event(self, stats: UserStats, event: SimulationEvent) -> UserStats:
        """
        Fold one event into a copy of the stats.

        Args:
            stats: Current stats (not modified)
            event: Event to apply

        Returns:
            Updated copy
        """
        updated = stats.model_copy(deep=True)
        kind = event.kind

        if kind == EventKind.SIMULATION_SHOWN:
            updated.simulations_seen += 1
        elif kind == EventKind.LINK_CLICKED:
            updated.simulations_clicked += 1
        elif kind == EventKind.CREDENTIAL_ENTERED:
            updated.credentials_entered += 1
        elif kind == EventKind.SIMULATION_IGNORED:
            updated.simulations_ignored += 1
        elif kind == EventKind.SIMULATION_DETECTED:
            updated.simulations_detected += 1
        elif kind == EventKind.REPORTED_PHISHING:
            updated.simulations_reported += 1
            updated.simulations_detected += 1

        delta = constants.RISK_WEIGHTS.get(kind.value, 0)
        updated.risk_score = int(clamp(
            updated.risk_score + delta,
            constants.MIN_RISK_SCORE,
            constants.MAX_RISK_SCORE,
        ))

        elapsed = event.elapsed_ms
        if kind == EventKind.SIMULATION_DETECTED and elapsed is not None:
            n = updated.simulations_detected
            updated.average_detection_time = (
                updated.average_detection_time * (n - 1) + elapsed
            ) / n

        self._update_progression(updated, kind)
        updated.last_updated = self.clock()
        return updated

    def _update_progression(self, stats: UserStats, kind: EventKind) -> None:
        progression = stats.difficulty_progression

        if kind in SUCCESS_EVENTS:
            progression.consecutive_successes += 1
            progression.consecutive_failures = 0
        elif kind in FAILURE_EVENTS:
            progression.consecutive_failures += 1
            progression.consecutive_successes = 0
        else:
            return

        successes = stats.simulations_detected
        failures = stats.simulations_clicked + stats.credentials_entered
        total = successes + failures
        progression.success_rate = round(successes / total, 4) if total else 0.0

        new_level = self.level_policy.next_level(progression)
        if new_level != progression.current_level:
            logger.info(
                f"Difficulty for {stats.user_id}: {progression.current_level.value} -> {new_level.value}"
            )
            progression.current_level = new_level
            progression.consecutive_successes = 0
            progression.consecutive_failures = 0

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    async def get_stats(self, user_id: str) -> UserStats:
        """Stored stats, or a fresh record if the user has none."""
        stats = await self.store.get_stats(user_id)
        return stats if stats is not None else self.new_stats(user_id)

    async def record_event(self, user_id: str, event: SimulationEvent) -> UserStats:
        """
        Apply an event and persist the result.

        Args:
            user_id: User the event belongs to
            event: Event to apply

        Returns:
            Updated stats
        """
        async with self._lock_for(user_id):
            current = await self.get_stats(user_id)
            updated = self.apply_event(current, event)
            await self.store.save_stats(updated)

        logger.info(
            f"Recorded {event.kind.value} for {user_id}: risk={updated.risk_score}, "
            f"level={updated.difficulty_progression.current_level.value}"
        )
        return updated
