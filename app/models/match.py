"""
Compare AI — Match model.

A match moves forward only::

    pending -> ready -> completed
    pending -> declined

``invited_photo`` is set by the ``ready`` transition and both scores by the
``completed`` transition; a completed match is never updated again.
"""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class MatchStatus(str, enum.Enum):
    PENDING = "pending"
    READY = "ready"
    DECLINED = "declined"
    COMPLETED = "completed"


_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in MatchStatus)


class Match(Base):
    __tablename__ = "matches"
    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_matches_status"),
        Index("ix_matches_creator_id", "creator_id"),
        Index("ix_matches_invited_id", "invited_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    creator_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    invited_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    creator_photo: Mapped[str] = mapped_column(
        Text, nullable=False, comment="Base64-encoded image"
    )
    invited_photo: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Base64-encoded image"
    )
    creator_score: Mapped[float | None] = mapped_column(
        Numeric(10, 3, asdecimal=False), nullable=True
    )
    invited_score: Mapped[float | None] = mapped_column(
        Numeric(10, 3, asdecimal=False), nullable=True
    )
    status: Mapped[str] = mapped_column(
        String,
        default=MatchStatus.PENDING.value,
        server_default=MatchStatus.PENDING.value,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<Match id={self.id} {self.creator_id} vs {self.invited_id} "
            f"status={self.status!r}>"
        )
