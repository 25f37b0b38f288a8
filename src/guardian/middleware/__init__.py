"""Middleware registration."""

from fastapi import FastAPI

from guardian.config import Settings
from guardian.middleware.cors import setup_cors
from guardian.middleware.error_handler import setup_error_handlers
from guardian.middleware.logging import setup_logging
from guardian.middleware.rate_limit import RateLimitMiddleware
from guardian.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Logging and error handlers first, then the middleware stack.

    Starlette wraps in reverse-add order, so the request id is bound before the
    rate limiter runs and CORS headers reach 429 responses too.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
