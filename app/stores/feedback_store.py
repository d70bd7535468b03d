"""
Compare AI — Feedback Store
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.feedback import Feedback


class FeedbackStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, user_id: int, text: str) -> Feedback:
        entry = Feedback(user_id=user_id, feedback=text)
        self.session.add(entry)
        await self.session.flush()
        return entry
