"""
BTSim Detection Data Models

Pydantic models for credential-risk detection input and results.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum


class Severity(str, Enum):
    """Risk factor severity."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Higher value ranks first
SEVERITY_RANK = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class DetectionMethod(str, Enum):
    """Which scoring path produced the confidence."""
    HEURISTIC = "heuristic"
    MODEL = "model"


class FormField(BaseModel):
    """Descriptor of a form input. Never carries the typed value."""
    type: str = Field("text", description="Input type attribute")
    name: str = Field("", description="Input name or id")
    autocomplete: Optional[str] = None
    is_password: bool = False
    is_hidden: bool = False


class UserBehavior(BaseModel):
    """Behavioral counters collected on the page."""
    time_on_page: int = Field(0, ge=0, description="Milliseconds on page")
    mouse_movements: int = Field(0, ge=0)
    keystrokes: int = Field(0, ge=0)
    form_interactions: int = Field(0, ge=0)


class DetectionInput(BaseModel):
    """Point-in-time snapshot of a page, its forms and user behavior."""
    form_fields: List[FormField] = Field(default_factory=list)
    url: str = ""
    page_title: str = ""
    page_content: str = ""
    user_behavior: UserBehavior = Field(default_factory=UserBehavior)
    timestamp: int = 0

    @property
    def has_password_field(self) -> bool:
        return any(f.is_password for f in self.form_fields)


class RiskFactor(BaseModel):
    """Single explainable contributor to a detection score."""
    type: str = Field(..., description="Factor identifier, e.g. insecure_protocol")
    severity: Severity
    description: str
    weight: float = Field(0.0, ge=0.0, description="Score contribution")


class RiskAssessment(BaseModel):
    """Credential-theft risk verdict for a DetectionInput."""
    is_credential_entry: bool = False
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    risk_factors: List[RiskFactor] = Field(default_factory=list, max_length=5)
    detection_method: DetectionMethod = DetectionMethod.HEURISTIC
    recommendations: List[str] = Field(default_factory=list)
