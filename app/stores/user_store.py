"""
Compare AI — User Store

Persistence for user records.  Every method runs inside the caller's
session; committing is the responsibility of the request scope
(``app.database.get_db``).
"""

from __future__ import annotations

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import ConflictError
from app.models.user import User

logger = structlog.get_logger("compare_ai.stores.users")


class UserStore:
    """Reads and writes ``users`` rows through one ``AsyncSession``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(User).where(User.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, username: str, password_hash: str) -> User:
        user = User(username=username, password_hash=password_hash, score=0)
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name.
            logger.warning("user_create_conflict", username=username)
            raise ConflictError("Username already exists") from None
        logger.info("user_created", user_id=user.id)
        return user

    async def increment_score(self, user_id: int, amount: int = 1) -> None:
        """Add ``amount`` to the user's score with a single UPDATE.

        The increment is computed by the database so concurrent completions
        never lose an update.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(score=User.score + amount)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

    async def leaderboard(self, limit: int) -> list[User]:
        """Return up to ``limit`` users, highest score first.

        Users with equal scores are ordered by id so pages are stable.
        """
        stmt = (
            select(User)
            .order_by(User.score.desc(), User.id.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
