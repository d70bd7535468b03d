"""
Compare AI — Leaderboard query

Read-only ranking of users by cumulative wins.
"""

from __future__ import annotations

import structlog

from app.stores.user_store import UserStore

logger = structlog.get_logger("compare_ai.leaderboard_service")

DEFAULT_LIMIT = 100


class LeaderboardService:
    def __init__(self, user_store: UserStore) -> None:
        self.user_store = user_store

    async def get_leaderboard(self, limit: int = DEFAULT_LIMIT) -> list[dict]:
        """Return ``[{"username", "score"}]`` ordered by score, highest first."""
        users = await self.user_store.leaderboard(limit)
        logger.debug("leaderboard_read", limit=limit, rows=len(users))
        return [{"username": u.username, "score": u.score} for u in users]
