"""Global exception handlers.

Services raise ``HTTPException`` for expected failures; these handlers cover
what escapes them: constraint violations that reached the database and any
unexpected error.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_integrity_error_handler(app)
    _register_generic_error_handler(app)


def _register_integrity_error_handler(app: FastAPI) -> None:
    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning(
            "integrity error",
            extra={"path": request.url.path, "status_code": status.HTTP_409_CONFLICT},
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": "The operation conflicts with existing data."},
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled error: {type(exc).__name__}",
            extra={"path": request.url.path, "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR},
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error."},
        )
