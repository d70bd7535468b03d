"""
Compare AI — Match Store

Persistence for match records, including the guarded status transition used
by the lifecycle controller.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.match import Match, MatchStatus

logger = structlog.get_logger("compare_ai.stores.matches")


class MatchStore:
    """Reads and writes ``matches`` rows through one ``AsyncSession``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        creator_id: int,
        invited_id: int,
        creator_photo: str,
    ) -> Match:
        match = Match(
            creator_id=creator_id,
            invited_id=invited_id,
            creator_photo=creator_photo,
            status=MatchStatus.PENDING.value,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(match)
        await self.session.flush()
        return match

    async def get(self, match_id: int) -> Match | None:
        return await self.session.get(Match, match_id)

    async def list_for_user(self, user_id: int) -> list[Match]:
        """All matches the user created or was invited to, newest first."""
        stmt = (
            select(Match)
            .where(or_(Match.creator_id == user_id, Match.invited_id == user_id))
            .order_by(Match.created_at.desc(), Match.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_for_user(self, user_id: int) -> int:
        """Delete every match the user takes part in; return how many went."""
        stmt = (
            delete(Match)
            .where(or_(Match.creator_id == user_id, Match.invited_id == user_id))
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def transition(
        self,
        match_id: int,
        expected_status: MatchStatus,
        **values: Any,
    ) -> Match | None:
        """Apply ``values`` only if the match is still in ``expected_status``.

        Returns the updated match, or ``None`` when another request already
        moved the match on (or it no longer exists).
        """
        stmt = (
            update(Match)
            .where(Match.id == match_id, Match.status == expected_status.value)
            .values(**values)
            .returning(Match)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        match = result.scalar_one_or_none()

        if match is None:
            logger.warning(
                "match_transition_rejected",
                match_id=match_id,
                expected_status=expected_status.value,
            )
        return match
