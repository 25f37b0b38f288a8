"""Global error handlers: every error response is a JSON body with `detail`."""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from guardian.exceptions import (
    AlreadyCompleted,
    AssignmentNotFound,
    BadgeNotEarned,
    BadgeNotFound,
    GuardianError,
    NoMissionsAvailable,
    UserNotFound,
)

logger = structlog.get_logger()


def status_for(exc: GuardianError) -> int:
    """HTTP status for a domain error that escaped a router."""
    if isinstance(exc, (AssignmentNotFound, BadgeNotFound, UserNotFound, NoMissionsAvailable)):
        return 404
    if isinstance(exc, AlreadyCompleted):
        return 409
    if isinstance(exc, BadgeNotEarned):
        return 403
    return 400


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(GuardianError)
    async def domain_exception_handler(request: Request, exc: GuardianError) -> JSONResponse:
        status = status_for(exc)
        logger.info("domain_error", path=request.url.path, error=str(exc), status=status)
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
