"""
Health check endpoints.

Used for monitoring and load balancer health checks.
"""
from datetime import datetime, timezone
import platform

from fastapi import APIRouter, Depends

from api.dependencies import current_orchestrator, get_settings
from core.settings import AppSettings


router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns system health status.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "guestflow",
        "version": "1.0.0",
        "python_version": platform.python_version(),
    }


@router.get("/health/ready")
async def readiness_check(settings: AppSettings = Depends(get_settings)):
    """
    Readiness check endpoint.

    Ready once the record store and the portal are configured.
    """
    checks = {
        "api": "ok",
        "record_store": "ok" if settings.sheets.spreadsheet_id else "missing spreadsheet id",
        "portal": "ok" if settings.portal.credentials.is_complete else "missing credentials",
    }
    orchestrator = current_orchestrator()
    return {
        "status": "ready" if all(value == "ok" for value in checks.values()) else "not_ready",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
        "run_in_progress": bool(orchestrator and orchestrator.is_running),
    }
