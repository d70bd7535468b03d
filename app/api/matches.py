"""
Compare AI — Matches API

Endpoints for opening a photo comparison, answering an invitation, running
the comparison, and listing or deleting the caller's matches.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status

from app.api.deps import get_current_user, get_match_service
from app.config import Settings, get_settings
from app.models.match import Match
from app.models.user import User
from app.schemas.match import CompareResponse, MatchResponse
from app.services.match_service import MatchService
from app.utils.uploads import read_photo

logger = structlog.get_logger("compare_ai.api.matches")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST / — Create a match
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=MatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user to a photo comparison",
)
async def create_match(
    invited_username: str = Form(..., alias="invitedUsername"),
    photo: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
    settings: Settings = Depends(get_settings),
) -> Match:
    """Upload the creator's photo and invite ``invitedUsername``.

    The match starts ``pending`` until the invitee responds.
    """
    photo_b64 = await read_photo(photo, settings.MAX_UPLOAD_BYTES)
    return await service.create_match(
        creator_id=user.id,
        invited_username=invited_username.strip(),
        photo=photo_b64,
    )


# ──────────────────────────────────────────────────────────────────────────────
# POST /{match_id}/respond — Accept or decline
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/{match_id}/respond", summary="Accept or decline an invitation")
async def respond_to_match(
    match_id: int,
    accept: str = Form("false"),
    photo: UploadFile | None = File(None),
    user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
    settings: Settings = Depends(get_settings),
) -> Response:
    """``accept`` is the string ``"true"`` to accept (a photo is then
    required); any other value, or none, declines."""
    accepted = accept.strip().lower() == "true"

    # Missing match and wrong caller are reported before the upload is looked at.
    await service.get_pending_invitation(match_id, user.id)

    photo_b64 = None
    if accepted:
        photo_b64 = await read_photo(photo, settings.MAX_UPLOAD_BYTES)

    await service.respond_to_match(
        match_id=match_id,
        responder_id=user.id,
        accept=accepted,
        photo=photo_b64,
    )
    return Response(status_code=status.HTTP_200_OK)


# ──────────────────────────────────────────────────────────────────────────────
# POST /{match_id}/compare — Score both photos
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/{match_id}/compare",
    response_model=CompareResponse,
    summary="Compare both photos and record the winner",
)
async def compare_match(
    match_id: int,
    user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
) -> CompareResponse:
    result = await service.compare_match(match_id=match_id, requester_id=user.id)
    return CompareResponse(
        creator_score=result["creator_score"],
        invited_score=result["invited_score"],
    )


# ──────────────────────────────────────────────────────────────────────────────
# GET / — List the caller's matches
# ──────────────────────────────────────────────────────────────────────────────

@router.get("", response_model=list[MatchResponse], summary="List my matches")
async def list_matches(
    user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
) -> list[Match]:
    return await service.get_user_matches(user.id)


# ──────────────────────────────────────────────────────────────────────────────
# DELETE / — Delete all of the caller's matches
# ──────────────────────────────────────────────────────────────────────────────

@router.delete("", summary="Delete all my matches")
async def delete_matches(
    user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
) -> Response:
    await service.delete_user_matches(user.id)
    return Response(status_code=status.HTTP_200_OK)


# ──────────────────────────────────────────────────────────────────────────────
# GET /{match_id} — Match detail
# ──────────────────────────────────────────────────────────────────────────────

@router.get("/{match_id}", response_model=MatchResponse, summary="Get one match")
async def get_match(
    match_id: int,
    user: User = Depends(get_current_user),
    service: MatchService = Depends(get_match_service),
) -> Match:
    return await service.get_match(match_id, user.id)
