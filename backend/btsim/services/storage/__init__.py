"""
BTSim Storage Module

Provides persistence for per-user stats and context maps.
"""

from .state_store import (
    StateStore,
    InMemoryStateStore,
    SQLiteStateStore,
    create_state_store,
)

__all__ = ['StateStore', 'InMemoryStateStore', 'SQLiteStateStore', 'create_state_store']
