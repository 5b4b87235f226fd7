"""Player-facing identities: Team and Profile."""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from wildpack.models.base import TimestampedModel


class Team(TimestampedModel):
    """team_xp is only ever changed by an atomic server-side increment."""

    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    colour: Mapped[str | None] = mapped_column(String(20), nullable=True)
    mascot_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    team_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


class Profile(TimestampedModel):
    """One child-facing player identity owned by a parent account."""

    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)  # owning account
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(100), nullable=True)
    colour: Mapped[str | None] = mapped_column(String(20), nullable=True)
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    team_contribution: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
