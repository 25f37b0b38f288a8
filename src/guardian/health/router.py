"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.config import get_settings
from guardian.database import get_session
from guardian.db.models import Badge, Mission
from guardian.redis_client import get_redis

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> dict[str, object]:
    """Readiness probe.

    Ready means the database answers and both catalogs are seeded; a day
    without active missions cannot assign anything. Redis is reported but
    optional, since rate limiting and events degrade to no-ops without it.
    """
    checks: dict[str, object] = {}

    try:
        missions = (await db.execute(
            select(func.count(Mission.id)).where(Mission.is_active.is_(True))
        )).scalar_one()
        badges = (await db.execute(
            select(func.count(Badge.id)).where(Badge.is_active.is_(True))
        )).scalar_one()
        checks["database"] = "ok"
        checks["catalog"] = "ok" if missions and badges else f"empty: {missions} missions, {badges} badges"
    except Exception as exc:
        checks["database"] = f"error: {exc}"

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except RuntimeError:
        checks["redis"] = "disabled"
    except Exception as exc:
        checks["redis"] = f"error: {exc}"

    required = ("database", "catalog")
    all_ok = all(checks.get(name) == "ok" for name in required)
    return {"status": "ready" if all_ok else "degraded", "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {
        "service": "climate-guardian-api",
        "version": settings.app_version,
        "environment": settings.environment,
    }
