"""
Health Check Router
Simple health check endpoint
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from finance_tracker.core.config import settings

router = APIRouter()


@router.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "storage": settings.STORAGE_BACKEND,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
