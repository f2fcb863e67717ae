"""Health check endpoints."""

from fastapi import APIRouter

from pulseboard.api.deps import AppSettings, BoardManager

router = APIRouter()


@router.get("/health")
async def health_check(settings: AppSettings) -> dict[str, str]:
    """Basic health check."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(
    settings: AppSettings,
    manager: BoardManager,
) -> dict[str, str | dict[str, str]]:
    """Readiness check including a board load from the configured store."""
    checks: dict[str, str] = {}

    try:
        await manager.snapshot()
        checks["store"] = "healthy"
    except Exception as e:
        checks["store"] = f"unhealthy: {str(e)}"

    overall_status = "healthy" if all(v == "healthy" for v in checks.values()) else "unhealthy"

    return {
        "status": overall_status,
        "version": settings.app_version,
        "checks": checks,
    }
