"""
BTSim Health API Routes

Health check and status endpoints.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from btsim.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check with component status.

    Returns:
        Overall status plus per-component checks
    """
    checks = {}
    all_ready = True

    try:
        from btsim.api.dependencies import get_detector
        engine = get_detector()
        summary = engine.get_rule_summary()
        checks["detection_engine"] = {
            "status": "ready",
            "rules_loaded": summary["total_rules"],
            "model_ready": summary["model_ready"],
        }
    except Exception as e:
        logger.error(f"Detection engine check failed: {e}")
        checks["detection_engine"] = {"status": "error", "error": str(e)}
        all_ready = False

    try:
        from btsim.api.dependencies import get_state_store
        store = get_state_store()
        checks["storage"] = {"status": "ready", "type": type(store).__name__}
    except Exception as e:
        logger.error(f"Storage check failed: {e}")
        checks["storage"] = {"status": "error", "error": str(e)}
        all_ready = False

    checks["red_team"] = {"status": "enabled" if settings.enable_red_team else "disabled"}

    return {
        "status": "healthy" if all_ready else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "btsim-api",
        "version": settings.app_version,
        "checks": checks,
    }
