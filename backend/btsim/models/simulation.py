"""
BTSim Simulation Data Models

Pydantic models for planned phishing simulations.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Union
from enum import Enum

from .context import Site


class AttackType(str, Enum):
    """Category of simulated attack."""
    CREDENTIAL_HARVEST = "credential_harvest"
    OAUTH_GRANT = "oauth_grant"
    MFA_BYPASS = "mfa_bypass"
    SESSION_HIJACK = "session_hijack"
    CLIPBOARD_HIJACK = "clipboard_hijack"
    FILE_DOWNLOAD = "file_download"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Difficulty(str, Enum):
    """Training difficulty, ordered easy < medium < hard < expert."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


DIFFICULTY_ORDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXPERT]


class Placement(str, Enum):
    """Where the injected UI is displayed."""
    MODAL = "modal"
    BANNER = "banner"
    INLINE = "inline"
    NOTIFICATION = "notification"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class TriggerKind(str, Enum):
    TIME = "time"
    ACTION = "action"
    URL = "url"
    ELEMENT = "element"
    MODEL_PREDICTION = "model_prediction"


class Comparison(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    GT = "gt"
    LT = "lt"
    REGEX = "regex"


class ContentStrategyName(str, Enum):
    """Which content path produced a simulation."""
    ENRICHED = "enriched"
    LOCAL = "local"
    RED_TEAM = "red_team"


class SimulationContent(BaseModel):
    """Rendered content handed to the injection collaborator."""
    title: str
    body: str
    sender: Optional[str] = None
    sender_email: Optional[str] = None
    urgency: Urgency = Urgency.MEDIUM
    action_text: str
    action_url: Optional[str] = None
    placement: Placement = Placement.MODAL
    theme: Theme = Theme.LIGHT
    brand_colors: List[str] = Field(default_factory=list)
    logo_url: Optional[str] = None


class TriggerCondition(BaseModel):
    """A gate that must be satisfied before a simulation is shown."""
    kind: TriggerKind
    value: Union[int, float, bool, str]
    comparison: Comparison


class SimulationMetadata(BaseModel):
    created_at: int = Field(..., description="Epoch milliseconds")
    campaign_id: str = "generated"
    difficulty: Difficulty = Difficulty.EASY
    training_objective: str = ""
    red_team: bool = False
    attack_vector_label: Optional[str] = Field(None, description="Operator-supplied vector name")
    content_strategy: ContentStrategyName = ContentStrategyName.ENRICHED


class PhishingSimulation(BaseModel):
    """A fully planned simulated attack."""
    id: str
    attack_type: AttackType
    target_site: Site
    content: SimulationContent
    trigger_conditions: List[TriggerCondition] = Field(default_factory=list)
    metadata: SimulationMetadata
