"""
Finalizer error taxonomy and global HTTP exception handlers.

Configuration errors are fatal for one company only; the orchestrator
catches them at the company boundary. The HTTP handlers keep stack traces
away from clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain errors ───────────────────────────────────────────────────
class FinalizerError(Exception):
    """Base class for attendance finalizer errors."""


class ConfigurationError(FinalizerError):
    """A company's stored configuration cannot be used for finalization."""


class InvalidTimezoneError(ConfigurationError):
    def __init__(self, timezone_name: str | None):
        self.timezone_name = timezone_name
        super().__init__(f"Invalid or missing IANA timezone: {timezone_name!r}")


class InvalidScheduleError(ConfigurationError):
    def __init__(self, team_id: int | None, detail: str):
        self.team_id = team_id
        self.detail = detail
        super().__init__(f"Team {team_id}: {detail}")


# ── HTTP handlers ───────────────────────────────────────────────────
async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    """Validation and routing errors on the trigger endpoints, in the common error body."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    """A constraint violation that escaped the per-worker write in a manual run."""
    logger.error("Finalizer request hit an integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"detail": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """A manual run could not list active companies; per-company errors never get here."""
    logger.error("Finalizer request failed on the database: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception in finalizer request: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers so finalizer routes never return a stack trace."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
