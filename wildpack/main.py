from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from wildpack.core.config import settings

import wildpack.models  # noqa: F401  register all models at startup

from wildpack.core.errors import global_exception_handler, http_exception_handler
from wildpack.core.sentry import init_sentry
from wildpack.modules.badges.router import router as badges_router
from wildpack.modules.completion.router import router as completion_router
from wildpack.modules.feed.router import router as feed_router
from wildpack.modules.progress.router import router as progress_router
from wildpack.modules.teams.router import router as teams_router

# ── Sentry: must be initialised BEFORE the FastAPI app is created ───────────
init_sentry(settings.SENTRY_DSN, settings.SENTRY_ENVIRONMENT, settings.APP_VERSION)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    logger.info("Starting Wildpack API", env=settings.APP_ENV)

    if settings.SEED_BADGES_ON_STARTUP:
        from wildpack.core.database import async_session_factory
        from wildpack.modules.badges.service import seed_badges

        async with async_session_factory() as db:
            try:
                await seed_badges(db)
            except Exception as exc:  # noqa: BLE001
                logger.warning("badge_seed_failed", error=str(exc))

    yield
    logger.info("Shutting down Wildpack API")


_is_prod = settings.is_production

app = FastAPI(
    title="Wildpack API",
    description="Progress and rewards for outdoor activity missions.",
    version="0.1.0",
    docs_url=None if _is_prod else "/docs",
    redoc_url=None if _is_prod else "/redoc",
    openapi_url=None if _is_prod else "/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
)

app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, global_exception_handler)


# ── Health check (root-level, not under /v1) ─────────────────────────────────


@app.get("/health")
async def health_check() -> dict:
    """Probes the progress store."""
    checks: dict[str, dict] = {}

    try:
        from sqlalchemy import text
        from wildpack.core.database import async_session_factory
        async with async_session_factory() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = {"status": "healthy"}
    except Exception as exc:
        checks["database"] = {"status": "unhealthy", "error": str(exc)}

    overall = (
        "healthy"
        if all(c["status"] == "healthy" for c in checks.values())
        else "degraded"
    )
    return {"status": overall, "service": "wildpack-api", "checks": checks}


# ── /v1 versioned router ──────────────────────────────────────────────────────

api_v1 = APIRouter(prefix="/v1")

api_v1.include_router(completion_router)
api_v1.include_router(progress_router)
api_v1.include_router(badges_router)
api_v1.include_router(teams_router)
api_v1.include_router(feed_router)

app.include_router(api_v1)
