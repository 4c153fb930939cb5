"""
BTSim API Application

Main FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from btsim.api.routes import get_api_router
from btsim.api.dependencies import init_state_store, get_detector
from btsim.config import get_settings
from btsim.utils.constants import APP_DESCRIPTION

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} API...")

    logger.info("=== Configuration ===")
    logger.info(f"  Storage: {settings.storage_type}")
    logger.info(f"  Detection threshold: {settings.detection_threshold}")
    logger.info(f"  Model enabled: {settings.model_enabled}")
    logger.info(f"  Content strategy: {settings.content_strategy}")
    logger.info(f"  Level policy: {settings.level_policy}")
    logger.info(f"  Red team: {'✓' if settings.enable_red_team and settings.red_team_api_key else '✗'}")

    init_state_store()

    engine = get_detector()
    logger.info(f"Detection engine initialized with {len(engine.rules)} rules")

    logger.info(f"{settings.app_name} API started successfully")

    yield

    logger.info(f"{settings.app_name} API shutdown complete")


settings = get_settings()

# Create FastAPI application
app = FastAPI(
    title=f"{settings.app_name} API",
    description=APP_DESCRIPTION,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
)

# Include API routes
app.include_router(get_api_router())


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint - API info."""
    return {
        "name": f"{settings.app_name} API",
        "description": APP_DESCRIPTION,
        "version": settings.app_version,
        "docs": "/docs",
    }


# Root-level health check (for Docker/K8s)
@app.get("/health")
async def health():
    """Basic health check."""
    return {
        "status": "healthy",
        "service": "btsim-api",
        "version": settings.app_version,
    }


# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if get_settings().debug else "An error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "btsim.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
