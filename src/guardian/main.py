"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from guardian.config import get_settings
from guardian.database import close_db, get_session, init_db
from guardian.gamification.router import router as badges_router
from guardian.gamification.seed import seed_badges
from guardian.health.router import router as health_router
from guardian.middleware import setup_middleware
from guardian.missions.catalog import seed_missions
from guardian.missions.router import router as missions_router
from guardian.progress.router import router as progress_router
from guardian.redis_client import close_redis, init_redis
from guardian.referrals.router import router as referrals_router
from guardian.users.router import router as users_router

logger = logging.getLogger(__name__)


async def seed_catalog() -> None:
    """Seed mission and badge definitions (idempotent)."""
    async for db in get_session():
        await seed_missions(db)
        await seed_badges(db)
        break


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await init_redis(settings.redis_url)

    try:
        await seed_catalog()
    except SQLAlchemyError:
        logger.warning("Catalog seeding failed (tables may not exist yet)", exc_info=True)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Climate Guardian API",
        description="Daily eco missions, streaks, badges and referrals",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(missions_router)
    app.include_router(progress_router)
    app.include_router(badges_router)
    app.include_router(referrals_router)

    return app


app = create_app()
