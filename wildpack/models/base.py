"""Declarative bases shared by every Wildpack table."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, false, func
from sqlalchemy.orm import Mapped, mapped_column

from wildpack.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModelMixin:
    """Integer pk plus a created_at stamped client-side.

    The Python default means a freshly flushed row already carries created_at,
    so async code never has to lazy-load the server default.
    """

    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"


class BaseModel(ModelMixin, Base):
    """Admin-managed catalog rows (activities, packs, badges). Soft-deleted, never removed."""

    __abstract__ = True

    is_deleted: Mapped[bool] = mapped_column(
        default=False,
        server_default=false(),
        nullable=False,
    )


class TimestampedModel(ModelMixin, Base):
    """Rows the engine writes: progress, photos, awards and ledger entries."""

    __abstract__ = True
