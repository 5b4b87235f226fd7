"""Domain exceptions and standardized error responses across all API endpoints."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = structlog.get_logger()


# ── Domain exceptions ────────────────────────────────────────────────────────


class NotFound(LookupError):
    """A referenced activity, profile, team or progress row does not exist. Nothing was written."""


class ActivityNotFound(NotFound):
    def __init__(self, activity_id: int) -> None:
        super().__init__(f"Activity {activity_id} not found")
        self.activity_id = activity_id


class ProfileNotFound(NotFound):
    def __init__(self, profile_id: int) -> None:
        super().__init__(f"Profile {profile_id} not found")
        self.profile_id = profile_id


class TeamNotFound(NotFound):
    def __init__(self, team_id: int) -> None:
        super().__init__(f"Team {team_id} not found")
        self.team_id = team_id


class ProgressNotFound(NotFound):
    def __init__(self, progress_id: int) -> None:
        super().__init__(f"Progress {progress_id} not found")
        self.progress_id = progress_id


class ValidationFailed(ValueError):
    """Input rejected before any mutation."""


class PhotoRequired(ValidationFailed):
    def __init__(self, activity_id: int) -> None:
        super().__init__(f"Activity {activity_id} requires a photo")
        self.activity_id = activity_id


class PersistenceFailure(RuntimeError):
    """The store rejected a read or write. Retrying the whole call is safe."""


class PartialRewardFailure(PersistenceFailure):
    """Progress is durably completed but the reward grant was rolled back.

    Retrying the completion re-attempts the grant; it is never applied twice.
    """

    def __init__(self, profile_id: int, activity_id: int) -> None:
        super().__init__(
            f"Rewards for profile {profile_id} on activity {activity_id} were not granted"
        )
        self.profile_id = profile_id
        self.activity_id = activity_id


# ── HTTP envelope ────────────────────────────────────────────────────────────


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a consistent JSON envelope."""
    request_id = request.headers.get("x-request-id", "unknown")

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="internal_server_error",
            message="Something went wrong. Please try again.",
            request_id=request_id,
        ).model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Standardize HTTPException responses into the same JSON envelope."""
    request_id = request.headers.get("x-request-id", "unknown")

    if isinstance(exc.detail, dict):
        error = exc.detail.get("error", f"http_{exc.status_code}")
        message = exc.detail.get("message", str(exc.detail))
        detail: Any = exc.detail.get("detail")
    else:
        error = f"http_{exc.status_code}"
        message = str(exc.detail)
        detail = exc.detail

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            detail=detail,
            request_id=request_id,
        ).model_dump(),
        headers=dict(exc.headers or {}),
    )
