"""
Compare AI — FastAPI dependencies

Builds request-scoped stores and services on top of the request's database
session, and resolves the logged-in user from the session cookie.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.database import get_db
from app.errors import UnauthenticatedError
from app.models.user import User
from app.services.auth_service import AuthService
from app.services.face_scorer import FaceScorer
from app.services.leaderboard_service import LeaderboardService
from app.services.match_service import MatchService
from app.stores.feedback_store import FeedbackStore
from app.stores.match_store import MatchStore
from app.stores.user_store import UserStore

logger = structlog.get_logger("compare_ai.api.deps")

SESSION_USER_KEY = "user_id"


# ── Stores ────────────────────────────────────────────────────────────────────

def get_user_store(
    db: AsyncSession = Depends(get_db, scope="function"),
) -> UserStore:
    return UserStore(db)


def get_match_store(
    db: AsyncSession = Depends(get_db, scope="function"),
) -> MatchStore:
    return MatchStore(db)


def get_feedback_store(
    db: AsyncSession = Depends(get_db, scope="function"),
) -> FeedbackStore:
    return FeedbackStore(db)


# ── Services ──────────────────────────────────────────────────────────────────

def get_face_scorer(request: Request) -> FaceScorer:
    return request.app.state.face_scorer


def get_match_service(
    user_store: UserStore = Depends(get_user_store),
    match_store: MatchStore = Depends(get_match_store),
    scorer: FaceScorer = Depends(get_face_scorer),
    settings: Settings = Depends(get_settings),
) -> MatchService:
    return MatchService(
        user_store=user_store,
        match_store=match_store,
        scorer=scorer,
        call_delay_seconds=settings.SCORER_CALL_DELAY_SECONDS,
    )


def get_leaderboard_service(
    user_store: UserStore = Depends(get_user_store),
) -> LeaderboardService:
    return LeaderboardService(user_store)


def get_auth_service(
    user_store: UserStore = Depends(get_user_store),
) -> AuthService:
    return AuthService(user_store)


# ── Session ───────────────────────────────────────────────────────────────────

async def get_current_user(
    request: Request,
    user_store: UserStore = Depends(get_user_store),
) -> User:
    """Return the user stored in the session cookie or raise 401."""
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        raise UnauthenticatedError()

    user = await user_store.get(user_id)
    if user is None:
        logger.warning("session_user_missing", user_id=user_id)
        request.session.clear()
        raise UnauthenticatedError()

    return user
