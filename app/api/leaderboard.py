"""
Compare AI — Leaderboard API (public)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_leaderboard_service
from app.config import get_settings
from app.schemas.user import LeaderboardEntry
from app.services.leaderboard_service import LeaderboardService

router = APIRouter()

_settings = get_settings()


@router.get(
    "",
    response_model=list[LeaderboardEntry],
    summary="Users ranked by wins",
)
async def get_leaderboard(
    limit: int = Query(
        _settings.LEADERBOARD_DEFAULT_LIMIT,
        ge=1,
        le=_settings.LEADERBOARD_MAX_LIMIT,
        description="Max entries to return",
    ),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> list[dict]:
    return await service.get_leaderboard(limit)
