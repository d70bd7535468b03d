"""
Compare AI — User model.
"""

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("score >= 0", name="ck_users_score_non_negative"),
        CheckConstraint("length(username) > 0", name="ck_users_username_non_empty"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    score: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False,
        comment="Number of comparisons won",
    )

    def __repr__(self) -> str:
        return f"<User {self.username!r} id={self.id} score={self.score}>"
