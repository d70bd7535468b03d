"""
Compare AI — Feedback API
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, get_feedback_store
from app.errors import BadRequestError
from app.models.user import User
from app.schemas.feedback import FeedbackCreate, MessageResponse
from app.stores.feedback_store import FeedbackStore

logger = structlog.get_logger("compare_ai.api.feedback")

router = APIRouter()


@router.post("", response_model=MessageResponse, summary="Send feedback")
async def submit_feedback(
    payload: FeedbackCreate,
    user: User = Depends(get_current_user),
    store: FeedbackStore = Depends(get_feedback_store),
) -> MessageResponse:
    text = payload.feedback.strip()
    if not text:
        raise BadRequestError("Feedback is required")

    await store.create(user.id, text)
    logger.info("feedback_submitted", user_id=user.id, length=len(text))
    return MessageResponse(message="Feedback submitted successfully")
