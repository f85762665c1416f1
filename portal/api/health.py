"""
Health check endpoint.
"""
from datetime import datetime, timezone
from fastapi import APIRouter

from portal.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.APP_NAME
    }
