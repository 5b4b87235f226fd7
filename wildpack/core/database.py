import structlog
from sqlalchemy import Insert
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from wildpack.core.config import settings

logger = structlog.get_logger()


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": 20,
        "max_overflow": 10,
        "pool_pre_ping": True,           # Drop stale connections before use
        "pool_recycle": 1800,            # Recycle connections every 30 min (avoids server-side timeouts)
        "pool_timeout": 30,              # Wait max 30s for a pool connection before raising
        "connect_args": {
            "server_settings": {
                "statement_timeout": "30000",                    # 30s max per SQL statement
                "idle_in_transaction_session_timeout": "60000",  # Kill idle-in-tx sessions after 60s
                "lock_timeout": "10000",                         # 10s max waiting for a row lock
            },
            "command_timeout": 30,
        },
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.APP_DEBUG,
    **_engine_kwargs(settings.DATABASE_URL),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:  # type: ignore[misc]
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def conflict_tolerant_insert(db: AsyncSession, model: type) -> Insert:
    """INSERT for ``model`` in the session's dialect, supporting ON CONFLICT.

    Both dialects expose ``on_conflict_do_nothing`` / ``on_conflict_do_update``
    with the same signature, so callers stay dialect-agnostic.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise NotImplementedError(f"ON CONFLICT inserts are not supported on {dialect}")
