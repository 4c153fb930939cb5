"""
BTSim Application Configuration

Configuration management using pydantic-settings.
All configuration values are loaded from environment variables (prefix-free)
or a local .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional
from functools import lru_cache

from btsim.utils import constants


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Values can be set via:
    1. Environment variables
    2. .env file (local development)
    3. Default values defined here
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=("settings_",),
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = constants.APP_NAME
    app_version: str = constants.APP_VERSION
    debug: bool = False

    # =========================================================================
    # Server
    # =========================================================================
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # =========================================================================
    # Detection
    # =========================================================================
    detection_threshold: float = Field(
        default=constants.DEFAULT_DETECTION_THRESHOLD, ge=0.0, le=1.0,
        description="Confidence above which a password page is flagged",
    )
    model_enabled: bool = Field(default=True, description="Use the trainable model when fitted")
    model_timeout_seconds: float = Field(default=constants.MODEL_TIMEOUT_SECONDS, gt=0)
    model_retrain_threshold: int = Field(default=constants.MODEL_RETRAIN_THRESHOLD, ge=1)

    # =========================================================================
    # Simulation cadence
    # =========================================================================
    min_simulation_interval_ms: int = Field(default=constants.MIN_SIMULATION_INTERVAL_MS, ge=0)
    max_simulations_per_session: int = Field(default=constants.MAX_SIMULATIONS_PER_SESSION, ge=0)
    content_strategy: str = Field(default="auto", description="auto, enriched or local")
    level_policy: str = Field(default="fixed", description="fixed or streak")
    max_session_planners: int = Field(default=constants.MAX_SESSION_PLANNERS, ge=1, description="Session planners kept in memory")

    # =========================================================================
    # Red team
    # =========================================================================
    enable_red_team: bool = True
    red_team_api_key: Optional[str] = Field(default=None, description="Operator key for red-team routes")

    # =========================================================================
    # Storage
    # =========================================================================
    storage_type: str = Field(default="memory", description="memory or sqlite")
    database_path: str = "data/btsim.db"
    event_dedup_window: int = Field(default=10000, ge=1, description="Recent event ids remembered")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are cached to avoid re-reading environment on every access.
    Use get_settings.cache_clear() to reload settings.
    """
    return Settings()
