# app/routers/health.py

from fastapi import APIRouter

from app.config import get_settings

settings = get_settings()
router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "recon-api",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check; reports the active matching thresholds."""
    return {
        "status": "ready",
        "matching": {
            "match_threshold": settings.match_threshold,
            "exception_severity_threshold": settings.exception_severity_threshold,
            "exact_match_bonus": settings.exact_match_bonus,
        },
    }
