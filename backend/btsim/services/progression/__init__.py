"""
BTSim Progression Module
"""

from .tracker import (
    ProgressionTracker,
    LevelPolicy,
    FixedLevelPolicy,
    StreakLevelPolicy,
    get_level_policy,
    EventDeduplicator,
)

__all__ = [
    'ProgressionTracker',
    'LevelPolicy',
    'FixedLevelPolicy',
    'StreakLevelPolicy',
    'get_level_policy',
    'EventDeduplicator',
]
