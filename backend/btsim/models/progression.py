"""
BTSim Progression Data Models

Pydantic models for interaction events and per-user training statistics.
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from enum import Enum

from .context import Site
from .simulation import Difficulty


class EventKind(str, Enum):
    """Discrete interaction events reported by the injection/alert UI."""
    SIMULATION_SHOWN = "simulation_shown"
    LINK_CLICKED = "link_clicked"
    FORM_FOCUSED = "form_focused"
    CREDENTIAL_ENTERED = "credential_entered"
    SIMULATION_DETECTED = "simulation_detected"
    SIMULATION_IGNORED = "simulation_ignored"
    REPORTED_PHISHING = "reported_phishing"
    SIMULATION_DISMISSED = "simulation_dismissed"


class SimulationEvent(BaseModel):
    """An observation about a simulation or a risk alert."""
    id: str = Field(..., description="Delivery id, used for de-duplication at the sync boundary")
    simulation_id: str = "unknown"
    kind: EventKind
    timestamp: int = Field(..., description="Epoch milliseconds")
    url: Optional[str] = None
    site: Optional[Site] = None
    shown_at: Optional[int] = Field(None, description="When the simulation was shown, epoch ms")
    detection_time_ms: Optional[int] = Field(None, ge=0, description="Elapsed time until detection")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def elapsed_ms(self) -> Optional[int]:
        """Detection time carried by the event, if any."""
        if self.detection_time_ms is not None:
            return self.detection_time_ms
        if self.shown_at is not None and self.timestamp >= self.shown_at:
            return self.timestamp - self.shown_at
        return None


class DifficultyProgression(BaseModel):
    current_level: Difficulty = Difficulty.EASY
    success_rate: float = Field(0.0, ge=0.0, le=1.0)
    consecutive_successes: int = Field(0, ge=0)
    consecutive_failures: int = Field(0, ge=0)


class UserStats(BaseModel):
    """Per-user training record. Mutated only by the progression tracker."""
    user_id: str
    simulations_seen: int = Field(0, ge=0)
    simulations_clicked: int = Field(0, ge=0)
    credentials_entered: int = Field(0, ge=0)
    simulations_detected: int = Field(0, ge=0)
    simulations_reported: int = Field(0, ge=0)
    simulations_ignored: int = Field(0, ge=0)
    average_detection_time: float = Field(0.0, ge=0.0, description="Running mean, milliseconds")
    difficulty_progression: DifficultyProgression = Field(default_factory=DifficultyProgression)
    risk_score: int = Field(50, ge=0, le=100)
    last_updated: int = 0
