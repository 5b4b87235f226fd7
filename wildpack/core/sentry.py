"""Sentry setup for the Wildpack API.

Every player profile belongs to a child, so events leave the process with
auth headers and any child-identifying request fields replaced.
"""

import structlog
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

logger = structlog.get_logger()

_REDACTED = "[REDACTED]"
_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
# request fields that can identify a child: free-text notes and hosted photo urls
_CHILD_FIELDS = {"name", "nickname", "notes", "photo_url"}


def _scrub_child_data(event: dict, hint: dict) -> dict:
    request = event.get("request") or {}
    headers = request.get("headers") or {}
    for header in list(headers):
        if header.lower() in _SENSITIVE_HEADERS:
            headers[header] = _REDACTED

    body = request.get("data")
    if isinstance(body, dict):
        for key in _CHILD_FIELDS & body.keys():
            body[key] = _REDACTED
    return event


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
) -> None:
    """Initialise Sentry. Call before the FastAPI app is built; no-op without a DSN."""
    if not dsn:
        logger.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return

    traces_sample_rate = 0.1 if environment == "production" else 1.0
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        before_send=_scrub_child_data,
    )
    logger.info("sentry_initialized", environment=environment, traces_sample_rate=traces_sample_rate)


def tag_player(profile_id: int, team_id: int | None) -> None:
    """Attach the acting player to the current scope by id only."""
    sentry_sdk.set_tag("profile_id", str(profile_id))
    if team_id is not None:
        sentry_sdk.set_tag("team_id", str(team_id))
