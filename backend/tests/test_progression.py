"""
BTSim Progression Tracker Tests
"""

import asyncio
import random

import pytest

from btsim.models.progression import EventKind, SimulationEvent, UserStats
from btsim.models.simulation import Difficulty
from btsim.services.progression import (
    EventDeduplicator,
    FixedLevelPolicy,
    ProgressionTracker,
    StreakLevelPolicy,
    get_level_policy,
)
from btsim.services.storage import InMemoryStateStore
from btsim.utils.exceptions import ConfigurationError

from conftest import FakeClock

_counter = 0


def create_test_event(kind: EventKind, **kwargs) -> SimulationEvent:
    """Create an event with a unique id."""
    global _counter
    _counter += 1
    defaults = {
        'id': f"evt-{_counter}",
        'simulation_id': "sim-1",
        'kind': kind,
        'timestamp': 1_700_000_000_000,
    }
    defaults.update(kwargs)
    return SimulationEvent(**defaults)


def apply_all(tracker, stats, kinds):
    for kind in kinds:
        stats = tracker.apply_event(stats, create_test_event(kind))
    return stats


class TestEventApplication:

    def setup_method(self):
        self.tracker = ProgressionTracker(clock=FakeClock())
        self.stats = ProgressionTracker.new_stats("user-1")

    def test_new_stats(self):
        assert self.stats.risk_score == 50
        assert self.stats.difficulty_progression.current_level == Difficulty.EASY
        assert self.stats.simulations_seen == 0

    def test_apply_is_pure(self):
        updated = self.tracker.apply_event(self.stats, create_test_event(EventKind.LINK_CLICKED))

        assert updated.simulations_clicked == 1
        assert self.stats.simulations_clicked == 0
        assert self.stats.risk_score == 50

    def test_risk_deltas(self):
        cases = {
            EventKind.SIMULATION_SHOWN: 50,
            EventKind.LINK_CLICKED: 75,
            EventKind.CREDENTIAL_ENTERED: 100,
            EventKind.SIMULATION_IGNORED: 60,
            EventKind.SIMULATION_DETECTED: 30,
            EventKind.REPORTED_PHISHING: 20,
            EventKind.FORM_FOCUSED: 50,
            EventKind.SIMULATION_DISMISSED: 50,
        }
        for kind, expected in cases.items():
            updated = self.tracker.apply_event(self.stats, create_test_event(kind))
            assert updated.risk_score == expected, kind

    def test_counters(self):
        stats = apply_all(self.tracker, self.stats, [
            EventKind.SIMULATION_SHOWN,
            EventKind.SIMULATION_SHOWN,
            EventKind.LINK_CLICKED,
            EventKind.CREDENTIAL_ENTERED,
            EventKind.SIMULATION_IGNORED,
            EventKind.REPORTED_PHISHING,
        ])

        assert stats.simulations_seen == 2
        assert stats.simulations_clicked == 1
        assert stats.credentials_entered == 1
        assert stats.simulations_ignored == 1
        assert stats.simulations_reported == 1
        assert stats.simulations_detected == 1

    def test_last_updated_from_clock(self):
        clock = FakeClock(start=42)
        tracker = ProgressionTracker(clock=clock)
        updated = tracker.apply_event(self.stats, create_test_event(EventKind.SIMULATION_SHOWN))
        assert updated.last_updated == 42


class TestRiskClamp:

    def test_saturates_at_bounds(self):
        tracker = ProgressionTracker()
        stats = ProgressionTracker.new_stats("user-1")

        high = apply_all(tracker, stats, [EventKind.CREDENTIAL_ENTERED] * 5)
        assert high.risk_score == 100

        low = apply_all(tracker, stats, [EventKind.REPORTED_PHISHING] * 5)
        assert low.risk_score == 0

    def test_random_streams_stay_in_range(self):
        tracker = ProgressionTracker()
        kinds = list(EventKind)

        for seed in range(25):
            rng = random.Random(seed)
            stats = ProgressionTracker.new_stats(f"user-{seed}")
            for _ in range(200):
                stats = tracker.apply_event(stats, create_test_event(rng.choice(kinds)))
                assert 0 <= stats.risk_score <= 100


class TestDetectionTime:

    def test_running_mean(self):
        tracker = ProgressionTracker()
        stats = ProgressionTracker.new_stats("user-1")

        stats = tracker.apply_event(stats, create_test_event(EventKind.SIMULATION_DETECTED, detection_time_ms=10000))
        assert stats.average_detection_time == 10000

        stats = tracker.apply_event(stats, create_test_event(EventKind.SIMULATION_DETECTED, detection_time_ms=20000))
        assert stats.average_detection_time == 15000

    def test_elapsed_from_shown_at(self):
        tracker = ProgressionTracker()
        stats = ProgressionTracker.new_stats("user-1")
        event = create_test_event(EventKind.SIMULATION_DETECTED, shown_at=1000, timestamp=7000)

        assert tracker.apply_event(stats, event).average_detection_time == 6000

    def test_detection_without_timing_leaves_mean(self):
        tracker = ProgressionTracker()
        stats = ProgressionTracker.new_stats("user-1")

        stats = tracker.apply_event(stats, create_test_event(EventKind.SIMULATION_DETECTED, detection_time_ms=8000))
        stats = tracker.apply_event(stats, create_test_event(EventKind.SIMULATION_DETECTED))

        assert stats.simulations_detected == 2
        assert stats.average_detection_time == 8000

    def test_reported_does_not_update_mean(self):
        tracker = ProgressionTracker()
        stats = ProgressionTracker.new_stats("user-1")
        stats = tracker.apply_event(stats, create_test_event(EventKind.REPORTED_PHISHING, detection_time_ms=500))

        assert stats.average_detection_time == 0.0


class TestProgression:

    def test_streaks(self):
        tracker = ProgressionTracker()
        stats = apply_all(tracker, ProgressionTracker.new_stats("u"), [
            EventKind.SIMULATION_DETECTED,
            EventKind.REPORTED_PHISHING,
        ])
        assert stats.difficulty_progression.consecutive_successes == 2
        assert stats.difficulty_progression.consecutive_failures == 0

        stats = apply_all(tracker, stats, [EventKind.LINK_CLICKED])
        assert stats.difficulty_progression.consecutive_successes == 0
        assert stats.difficulty_progression.consecutive_failures == 1

        # Neutral events leave streaks alone
        stats = apply_all(tracker, stats, [EventKind.SIMULATION_SHOWN, EventKind.FORM_FOCUSED])
        assert stats.difficulty_progression.consecutive_failures == 1

    def test_success_rate(self):
        tracker = ProgressionTracker()
        stats = apply_all(tracker, ProgressionTracker.new_stats("u"), [
            EventKind.SIMULATION_DETECTED,
            EventKind.LINK_CLICKED,
            EventKind.CREDENTIAL_ENTERED,
        ])
        assert stats.difficulty_progression.success_rate == pytest.approx(0.3333)

    def test_fixed_policy_never_moves(self):
        tracker = ProgressionTracker(level_policy=FixedLevelPolicy())
        stats = apply_all(tracker, ProgressionTracker.new_stats("u"), [EventKind.SIMULATION_DETECTED] * 10)

        assert stats.difficulty_progression.current_level == Difficulty.EASY
        assert stats.difficulty_progression.consecutive_successes == 10

    def test_streak_policy_promotes(self):
        tracker = ProgressionTracker(level_policy=StreakLevelPolicy())
        stats = apply_all(tracker, ProgressionTracker.new_stats("u"), [EventKind.SIMULATION_DETECTED] * 3)

        progression = stats.difficulty_progression
        assert progression.current_level == Difficulty.MEDIUM
        assert progression.consecutive_successes == 0

    def test_streak_policy_caps_and_floors(self):
        tracker = ProgressionTracker(level_policy=StreakLevelPolicy())
        stats = apply_all(tracker, ProgressionTracker.new_stats("u"), [EventKind.SIMULATION_DETECTED] * 30)
        assert stats.difficulty_progression.current_level == Difficulty.EXPERT

        stats = apply_all(tracker, stats, [EventKind.LINK_CLICKED] * 2)
        assert stats.difficulty_progression.current_level == Difficulty.HARD

        stats = apply_all(tracker, stats, [EventKind.CREDENTIAL_ENTERED] * 20)
        assert stats.difficulty_progression.current_level == Difficulty.EASY

    def test_get_level_policy(self):
        assert isinstance(get_level_policy("fixed"), FixedLevelPolicy)
        assert isinstance(get_level_policy("Streak"), StreakLevelPolicy)

        with pytest.raises(ConfigurationError):
            get_level_policy("random")


class TestDeduplication:

    def test_duplicates_rejected(self):
        dedup = EventDeduplicator()
        assert dedup.accept("a") is True
        assert dedup.accept("a") is False
        assert dedup.accept("b") is True

    def test_window_is_bounded(self):
        dedup = EventDeduplicator(window=3)
        for event_id in ["a", "b", "c", "d"]:
            dedup.accept(event_id)

        assert len(dedup) == 3
        # Oldest id forgotten
        assert dedup.accept("a") is True
        assert dedup.accept("d") is False


class TestRecordEvent:

    def test_persists_stats(self):
        store = InMemoryStateStore()
        tracker = ProgressionTracker(store=store)

        async def run():
            await tracker.record_event("user-1", create_test_event(EventKind.LINK_CLICKED))
            await tracker.record_event("user-1", create_test_event(EventKind.CREDENTIAL_ENTERED))
            return await store.get_stats("user-1")

        stored = asyncio.run(run())

        assert isinstance(stored, UserStats)
        assert stored.simulations_clicked == 1
        assert stored.credentials_entered == 1
        assert stored.risk_score == 100

    def test_unknown_user_gets_fresh_stats(self):
        tracker = ProgressionTracker()
        stats = asyncio.run(tracker.get_stats("nobody"))

        assert stats.user_id == "nobody"
        assert stats.risk_score == 50

    def test_concurrent_events_serialised(self):
        tracker = ProgressionTracker()

        async def run():
            events = [create_test_event(EventKind.SIMULATION_SHOWN) for _ in range(20)]
            await asyncio.gather(*(tracker.record_event("user-1", e) for e in events))
            return await tracker.get_stats("user-1")

        assert asyncio.run(run()).simulations_seen == 20
