"""
BTSim Services Package

Business logic modules:
- context: Aggregation of per-site user context
- detection: Rule-based credential-risk detection
- simulation: Cadence and planning of phishing simulations
- progression: User stats and difficulty progression
- storage: Per-user state persistence
"""

# Services are imported explicitly when needed to avoid circular imports
# Example: from btsim.services.detection import get_detection_engine

__all__ = [
    'context',
    'detection',
    'simulation',
    'progression',
    'storage',
]
