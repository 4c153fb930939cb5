"""
BTSim API Dependencies

FastAPI dependency injection for settings, stores, planners and the tracker.
"""

import hmac
import logging
import random
from collections import OrderedDict
from typing import Optional

from btsim.config import Settings, get_settings
from btsim.services.detection import DetectionEngine, get_detection_engine, reset_detection_engine
from btsim.services.progression import (
    EventDeduplicator,
    ProgressionTracker,
    get_level_policy,
)
from btsim.services.simulation import CadencePolicy, SimulationPlanner
from btsim.services.storage import StateStore, create_state_store
from btsim.utils.exceptions import UnauthorizedOperatorError

logger = logging.getLogger(__name__)


# Global instances
_state_store: Optional[StateStore] = None
_tracker: Optional[ProgressionTracker] = None
_deduplicator: Optional[EventDeduplicator] = None
_planners: "OrderedDict[str, SimulationPlanner]" = OrderedDict()


def init_state_store(store_type: Optional[str] = None, db_path: Optional[str] = None) -> StateStore:
    """Initialize the state store from settings (arguments override)."""
    global _state_store
    settings = get_settings()
    _state_store = create_state_store(
        store_type or settings.storage_type,
        db_path or settings.database_path,
    )
    return _state_store


def get_state_store() -> StateStore:
    """Get the state store, initializing from settings on first use."""
    global _state_store
    if _state_store is None:
        _state_store = init_state_store()
    return _state_store


def get_progression_tracker() -> ProgressionTracker:
    """Get the progression tracker bound to the state store."""
    global _tracker
    if _tracker is None:
        settings = get_settings()
        _tracker = ProgressionTracker(
            store=get_state_store(),
            level_policy=get_level_policy(settings.level_policy),
        )
    return _tracker


def get_event_deduplicator() -> EventDeduplicator:
    """Get the event-id deduplicator for the sync boundary."""
    global _deduplicator
    if _deduplicator is None:
        _deduplicator = EventDeduplicator(window=get_settings().event_dedup_window)
    return _deduplicator


def get_planner(session_id: str) -> SimulationPlanner:
    """
    Get the planner for a session, creating it on first use.

    Each session owns its own cadence state. Least recently used planners
    are evicted once max_session_planners is exceeded.
    """
    planner = find_planner(session_id)
    if planner is None:
        settings = get_settings()
        planner = SimulationPlanner(
            policy=CadencePolicy(
                max_simulations_per_session=settings.max_simulations_per_session,
                min_interval_ms=settings.min_simulation_interval_ms,
            ),
            rng=random.Random(),
            content_strategy=settings.content_strategy,
        )
        _planners[session_id] = planner
        logger.debug(f"Created planner for session {session_id}")

        while len(_planners) > settings.max_session_planners:
            evicted, _ = _planners.popitem(last=False)
            logger.debug(f"Evicted planner for session {evicted}")
    return planner


def find_planner(session_id: str) -> Optional[SimulationPlanner]:
    """Existing planner for a session, or None. Never creates one."""
    planner = _planners.get(session_id)
    if planner is not None:
        _planners.move_to_end(session_id)
    return planner


def get_detector() -> DetectionEngine:
    return get_detection_engine()


def verify_operator(api_key: Optional[str], settings: Optional[Settings] = None) -> None:
    """
    Check red-team access.

    Raises:
        UnauthorizedOperatorError: if red team is disabled or the key does not match
    """
    settings = settings or get_settings()
    if not settings.enable_red_team:
        raise UnauthorizedOperatorError("Red-team mode is disabled")
    expected = settings.red_team_api_key
    if not expected or not api_key or not hmac.compare_digest(api_key, expected):
        raise UnauthorizedOperatorError("Invalid operator key")


def reset_dependencies() -> None:
    """Drop all cached instances so the next access rebuilds them from settings."""
    global _state_store, _tracker, _deduplicator
    _state_store = None
    _tracker = None
    _deduplicator = None
    _planners.clear()
    reset_detection_engine()
