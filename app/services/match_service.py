"""
Compare AI — Match lifecycle controller

Drives a match through its states:

    create_match      ->  pending
    respond (decline) ->  pending -> declined   (terminal)
    respond (accept)  ->  pending -> ready      (invited photo stored)
    compare           ->  ready   -> completed  (both scores stored, winner +1)

Every transition is applied with ``MatchStore.transition``, a conditional
update on the expected current status, so two concurrent requests cannot both
apply it.  The winner rule is ``creator_score > invited_score`` for the
creator; equal scores go to the invited user.

The two scorer calls of a comparison are strictly sequential with a fixed
delay between them to stay under the external API's rate limit.  If either
call fails nothing is written and the match stays ``ready``, so the client can
simply retry.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.match import Match, MatchStatus
from app.services.face_scorer import FaceScorer
from app.stores.match_store import MatchStore
from app.stores.user_store import UserStore

logger = structlog.get_logger("compare_ai.match_service")


def pick_winner(match: Match, creator_score: float, invited_score: float) -> int:
    """Return the id of the user credited with the win.

    Only a strictly greater creator score wins for the creator; ties are
    credited to the invited user.
    """
    if creator_score > invited_score:
        return match.creator_id
    return match.invited_id


class MatchService:
    """Orchestrates match state transitions and scoring.

    Dependencies are injected at construction so that the service can be
    tested with in-memory stores and a mocked scorer.
    """

    def __init__(
        self,
        user_store: UserStore,
        match_store: MatchStore,
        scorer: FaceScorer,
        call_delay_seconds: float = 0.5,
    ) -> None:
        self.user_store = user_store
        self.match_store = match_store
        self.scorer = scorer
        self.call_delay_seconds = call_delay_seconds

    # ── Creation ──────────────────────────────────────────────────────────

    async def create_match(
        self,
        creator_id: int,
        invited_username: str,
        photo: str,
    ) -> Match:
        """Open a ``pending`` match from ``creator_id`` to ``invited_username``.

        Raises
        ------
        NotFoundError
            If no user has ``invited_username``.
        BadRequestError
            If the photo is empty or the creator invites themselves.
        """
        log = logger.bind(creator_id=creator_id, invited_username=invited_username)

        if not photo:
            raise BadRequestError("No photo uploaded")

        invited = await self.user_store.get_by_username(invited_username)
        if invited is None:
            log.warning("create_match_invitee_not_found")
            raise NotFoundError("Invited user not found")

        if invited.id == creator_id:
            log.warning("create_match_self_invite")
            raise BadRequestError("You cannot invite yourself")

        match = await self.match_store.create(
            creator_id=creator_id,
            invited_id=invited.id,
            creator_photo=photo,
        )
        log.info("match_created", match_id=match.id, invited_id=invited.id)
        return match

    # ── Invitation response ───────────────────────────────────────────────

    async def get_pending_invitation(self, match_id: int, responder_id: int) -> Match:
        """Return the match if ``responder_id`` may still answer it.

        Raises ``NotFoundError``, then ``ForbiddenError`` for anyone but the
        invitee, then ``BadRequestError`` once the match has been answered.
        """
        match = await self._get_existing(match_id)
        if match.invited_id != responder_id:
            logger.warning("respond_forbidden", match_id=match_id, responder_id=responder_id)
            raise ForbiddenError()

        if match.status != MatchStatus.PENDING.value:
            logger.warning("respond_invalid_status", match_id=match_id, status=match.status)
            raise BadRequestError("Match has already been answered")
        return match

    async def respond_to_match(
        self,
        match_id: int,
        responder_id: int,
        accept: bool,
        photo: str | None = None,
    ) -> Match:
        """Accept (with a photo) or decline a pending invitation."""
        log = logger.bind(match_id=match_id, responder_id=responder_id, accept=accept)

        await self.get_pending_invitation(match_id, responder_id)

        if accept:
            if not photo:
                raise BadRequestError("No photo uploaded")
            updated = await self.match_store.transition(
                match_id,
                MatchStatus.PENDING,
                invited_photo=photo,
                status=MatchStatus.READY.value,
            )
        else:
            updated = await self.match_store.transition(
                match_id,
                MatchStatus.PENDING,
                status=MatchStatus.DECLINED.value,
            )

        if updated is None:
            raise BadRequestError("Match has already been answered")

        log.info("match_responded", status=updated.status)
        return updated

    # ── Comparison ────────────────────────────────────────────────────────

    async def compare_match(self, match_id: int, requester_id: int) -> dict[str, Any]:
        """Score both photos, record the result and credit the winner.

        Returns
        -------
        dict
            ``{"creator_score", "invited_score", "winner_id"}``.

        Raises
        ------
        FaceScorerError
            If either scorer call fails; the match is left untouched.
        """
        log = logger.bind(match_id=match_id, requester_id=requester_id)
        log.info("compare_match_start")

        match = await self._get_existing(match_id)
        if match.creator_id != requester_id:
            log.warning("compare_forbidden")
            raise ForbiddenError()
        if match.status != MatchStatus.READY.value:
            log.warning("compare_not_ready", status=match.status)
            raise BadRequestError("Match not ready for comparison")

        log.info("analyzing_creator_photo")
        creator_score = await self.scorer.analyze_face(match.creator_photo)

        await asyncio.sleep(self.call_delay_seconds)

        log.info("analyzing_invited_photo")
        invited_score = await self.scorer.analyze_face(match.invited_photo)

        winner_id = pick_winner(match, creator_score, invited_score)

        completed = await self.match_store.transition(
            match_id,
            MatchStatus.READY,
            creator_score=creator_score,
            invited_score=invited_score,
            status=MatchStatus.COMPLETED.value,
        )
        if completed is None:
            # Another compare finished first; its result stands.
            log.warning("compare_lost_race")
            raise BadRequestError("Match not ready for comparison")

        await self.user_store.increment_score(winner_id, 1)

        log.info(
            "compare_match_complete",
            creator_score=creator_score,
            invited_score=invited_score,
            winner_id=winner_id,
        )
        return {
            "creator_score": creator_score,
            "invited_score": invited_score,
            "winner_id": winner_id,
        }

    # ── Retrieval / deletion ──────────────────────────────────────────────

    async def get_match(self, match_id: int, user_id: int) -> Match:
        """Return a match visible to ``user_id`` (its creator or invitee)."""
        match = await self._get_existing(match_id)
        if user_id not in (match.creator_id, match.invited_id):
            raise ForbiddenError()
        return match

    async def get_user_matches(self, user_id: int) -> list[Match]:
        return await self.match_store.list_for_user(user_id)

    async def delete_user_matches(self, user_id: int) -> int:
        deleted = await self.match_store.delete_for_user(user_id)
        logger.info("user_matches_deleted", user_id=user_id, deleted=deleted)
        return deleted

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_existing(self, match_id: int) -> Match:
        match = await self.match_store.get(match_id)
        if match is None:
            raise NotFoundError("Match not found")
        return match
