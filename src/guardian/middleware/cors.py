"""CORS for the Climate Guardian web and PWA front-ends."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from guardian.config import Settings

ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-Id"]


def allowed_origins(settings: Settings) -> list[str]:
    """Configured origins plus the front-end that serves share and referral links."""
    origins = list(settings.cors_origins)
    frontend = settings.frontend_base_url.rstrip("/")
    if frontend and frontend not in origins:
        origins.append(frontend)
    return origins


def setup_cors(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=ALLOWED_HEADERS,
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
