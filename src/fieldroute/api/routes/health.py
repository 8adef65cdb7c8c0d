"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_distance_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.distance_client import check_health as distance_health_check
    return distance_health_check


@router.get("/health/distance", status_code=status.HTTP_200_OK)
def health_distance() -> dict:
    """Check distance provider health; fallbacks are used when it is down or unset."""
    if not settings.distance_provider_url:
        return {"service": "distance", "configured": False, "healthy": False, "fallback": "haversine"}
    try:
        distance_health_check = _get_distance_health_check()
        status_flag = distance_health_check()
        return {"service": "distance", "configured": True, "healthy": status_flag}
    except Exception as e:
        return {"service": "distance", "configured": True, "healthy": False, "error": str(e)}
