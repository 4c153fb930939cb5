"""
BTSim Context Data Models

Pydantic models for per-site user signals and the aggregated context analysis.
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from enum import Enum


class Site(str, Enum):
    """External service a simulation targets."""
    GITHUB = "github"
    LINKEDIN = "linkedin"
    GMAIL = "gmail"
    UNKNOWN = "unknown"


class RiskProfile(str, Enum):
    """Exposure classification derived from user context."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Activity(BaseModel):
    """A single recent activity item scraped from a site."""
    type: str = Field(..., description="Activity type (commit, post, email, ...)")
    content: str = Field("", description="Text snippet")
    timestamp: int = Field(..., description="Epoch milliseconds")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Connection(BaseModel):
    """A contact in the user's graph on a site."""
    name: str = Field(..., description="Display name")
    site: Optional[Site] = Field(None, description="Site the connection was seen on")
    relationship: str = Field("connection", description="Relationship label")
    strength: Optional[float] = Field(None, ge=0.0, le=1.0, description="Relationship strength 0-1")
    recent_interaction: Optional[str] = None


class UserContext(BaseModel):
    """Snapshot of the user's signals on one site."""
    site: Site = Field(Site.UNKNOWN, description="Site the snapshot was captured on")
    user_id: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    organization: Optional[str] = None
    recent_activity: List[Activity] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)
    timestamp: int = Field(0, description="Capture time, epoch milliseconds")


class TimingPattern(BaseModel):
    """Most active hour/day observed in activity timestamps."""
    best_hour: int = Field(9, ge=0, le=23, description="Hour of day 0-23")
    best_day: int = Field(0, ge=0, le=6, description="Day of week, 0=Monday")
    sample_size: int = Field(0, ge=0)


class ContextAnalysis(BaseModel):
    """Aggregated view over all per-site contexts."""
    risk_profile: RiskProfile = Field(RiskProfile.MEDIUM)
    primary_site: Site = Field(Site.UNKNOWN)
    key_contacts: List[str] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    organizations: List[str] = Field(default_factory=list)
    suggested_attack_vectors: List[str] = Field(
        default_factory=lambda: ["credential_harvest"],
        min_length=1,
    )
    personalization_score: int = Field(0, ge=0, le=100, description="Personalization completeness 0-100")
    timing: TimingPattern = Field(default_factory=TimingPattern)
    anomalies: Dict[Site, List[str]] = Field(default_factory=dict)
