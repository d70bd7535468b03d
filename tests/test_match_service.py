"""Unit tests for MatchService — match lifecycle and scoring."""
import pytest
from unittest.mock import patch

from app.errors import BadRequestError, ForbiddenError, NotFoundError
from app.models.match import MatchStatus
from app.services.face_scorer import FaceScorerError
from app.services.match_service import MatchService, pick_winner


class TestCreateMatch:
    """Tests for opening a match."""

    @pytest.mark.asyncio
    async def test_creates_pending_match(self, match_service, alice, bob, photo_p1):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        assert match.status == MatchStatus.PENDING.value
        assert match.creator_id == alice.id
        assert match.invited_id == bob.id
        assert match.creator_photo == photo_p1
        assert match.invited_photo is None
        assert match.creator_score is None
        assert match.invited_score is None

    @pytest.mark.asyncio
    async def test_unknown_invitee(self, match_service, match_store, alice, photo_p1):
        with pytest.raises(NotFoundError):
            await match_service.create_match(alice.id, "nobody", photo_p1)
        assert match_store.matches == {}

    @pytest.mark.asyncio
    async def test_self_invite_rejected(self, match_service, match_store, alice, photo_p1):
        with pytest.raises(BadRequestError):
            await match_service.create_match(alice.id, "alice", photo_p1)
        assert match_store.matches == {}

    @pytest.mark.asyncio
    async def test_empty_photo_rejected(self, match_service, alice, bob):
        with pytest.raises(BadRequestError):
            await match_service.create_match(alice.id, "bob", "")


class TestRespondToMatch:
    """Tests for the invitee's accept / decline."""

    @pytest.mark.asyncio
    async def test_decline_is_terminal(self, match_service, alice, bob, photo_p1, photo_p2):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        updated = await match_service.respond_to_match(match.id, bob.id, accept=False)
        assert updated.status == MatchStatus.DECLINED.value
        assert updated.invited_photo is None

        # No further transition is reachable from declined.
        with pytest.raises(BadRequestError):
            await match_service.respond_to_match(match.id, bob.id, accept=True, photo=photo_p2)
        with pytest.raises(BadRequestError):
            await match_service.compare_match(match.id, alice.id)
        assert match.status == MatchStatus.DECLINED.value

    @pytest.mark.asyncio
    async def test_accept_sets_photo_and_ready(self, match_service, alice, bob, photo_p1, photo_p2):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        updated = await match_service.respond_to_match(match.id, bob.id, accept=True, photo=photo_p2)
        assert updated.status == MatchStatus.READY.value
        assert updated.invited_photo == photo_p2

    @pytest.mark.asyncio
    async def test_accept_requires_photo(self, match_service, alice, bob, photo_p1):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        with pytest.raises(BadRequestError):
            await match_service.respond_to_match(match.id, bob.id, accept=True, photo=None)
        assert match.status == MatchStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_only_invitee_may_respond(self, match_service, alice, bob, carol, photo_p1):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        with pytest.raises(ForbiddenError):
            await match_service.respond_to_match(match.id, alice.id, accept=False)
        with pytest.raises(ForbiddenError):
            await match_service.respond_to_match(match.id, carol.id, accept=False)
        assert match.status == MatchStatus.PENDING.value

    @pytest.mark.asyncio
    async def test_missing_match(self, match_service, bob):
        with pytest.raises(NotFoundError):
            await match_service.respond_to_match(999, bob.id, accept=False)

    @pytest.mark.asyncio
    async def test_second_accept_not_reapplied(self, match_service, alice, bob, photo_p1, photo_p2):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        await match_service.respond_to_match(match.id, bob.id, accept=True, photo=photo_p2)
        with pytest.raises(BadRequestError):
            await match_service.respond_to_match(match.id, bob.id, accept=True, photo="other")
        assert match.invited_photo == photo_p2


class TestGetPendingInvitation:
    """Checks run before the invitee's upload is read."""

    @pytest.mark.asyncio
    async def test_returns_pending_match_for_invitee(self, match_service, alice, bob, photo_p1):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        assert await match_service.get_pending_invitation(match.id, bob.id) is match

    @pytest.mark.asyncio
    async def test_missing_before_forbidden(self, match_service, carol):
        with pytest.raises(NotFoundError):
            await match_service.get_pending_invitation(999, carol.id)

    @pytest.mark.asyncio
    async def test_forbidden_before_status(self, match_service, alice, bob, carol, photo_p1):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        await match_service.respond_to_match(match.id, bob.id, accept=False)
        with pytest.raises(ForbiddenError):
            await match_service.get_pending_invitation(match.id, carol.id)

    @pytest.mark.asyncio
    async def test_answered_match(self, match_service, alice, bob, photo_p1):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        await match_service.respond_to_match(match.id, bob.id, accept=False)
        with pytest.raises(BadRequestError, match="already been answered"):
            await match_service.get_pending_invitation(match.id, bob.id)


class TestCompareMatch:
    """Tests for scoring and completion."""

    async def _ready_match(self, service, creator, invitee_name, invitee, p1, p2):
        match = await service.create_match(creator.id, invitee_name, p1)
        await service.respond_to_match(match.id, invitee.id, accept=True, photo=p2)
        return match

    @pytest.mark.asyncio
    async def test_creator_wins(self, match_service, scorer, user_store, alice, bob, photo_p1, photo_p2):
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)
        scorer.analyze_face.side_effect = [90.0, 70.0]

        result = await match_service.compare_match(match.id, alice.id)

        assert result["creator_score"] == 90.0
        assert result["invited_score"] == 70.0
        assert result["winner_id"] == alice.id
        assert match.status == MatchStatus.COMPLETED.value
        assert alice.score == 1
        assert bob.score == 0

    @pytest.mark.asyncio
    async def test_scorer_called_in_order(self, match_service, scorer, alice, bob, photo_p1, photo_p2):
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)
        scorer.analyze_face.side_effect = [60.0, 61.0]

        await match_service.compare_match(match.id, alice.id)

        calls = [c.args[0] for c in scorer.analyze_face.await_args_list]
        assert calls == [photo_p1, photo_p2]

    @pytest.mark.asyncio
    async def test_delay_between_scorer_calls(self, user_store, match_store, scorer, alice, bob, photo_p1, photo_p2):
        service = MatchService(user_store, match_store, scorer, call_delay_seconds=0.5)
        match = await self._ready_match(service, alice, "bob", bob, photo_p1, photo_p2)
        scorer.analyze_face.side_effect = [60.0, 61.0]

        with patch("app.services.match_service.asyncio.sleep") as mock_sleep:
            await service.compare_match(match.id, alice.id)

        mock_sleep.assert_awaited_once_with(0.5)

    @pytest.mark.asyncio
    async def test_tie_goes_to_invitee(self, match_service, scorer, alice, bob, photo_p1, photo_p2):
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)
        scorer.analyze_face.side_effect = [75.5, 75.5]

        result = await match_service.compare_match(match.id, alice.id)

        assert result["winner_id"] == bob.id
        assert bob.score == 1
        assert alice.score == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing_call", [0, 1])
    async def test_scorer_failure_leaves_match_ready(
        self, match_service, scorer, alice, bob, photo_p1, photo_p2, failing_call
    ):
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)
        effects = [80.0, 82.5]
        effects[failing_call] = FaceScorerError("No face detected in the image")
        scorer.analyze_face.side_effect = effects

        with pytest.raises(FaceScorerError, match="No face detected"):
            await match_service.compare_match(match.id, alice.id)

        assert match.status == MatchStatus.READY.value
        assert match.creator_score is None
        assert match.invited_score is None
        assert alice.score == 0
        assert bob.score == 0

    @pytest.mark.asyncio
    async def test_retry_after_failure_succeeds(self, match_service, scorer, alice, bob, photo_p1, photo_p2):
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)
        scorer.analyze_face.side_effect = [80.0, FaceScorerError("rate limited")]
        with pytest.raises(FaceScorerError):
            await match_service.compare_match(match.id, alice.id)

        scorer.analyze_face.side_effect = [80.0, 82.5]
        await match_service.compare_match(match.id, alice.id)

        assert match.status == MatchStatus.COMPLETED.value
        assert bob.score == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("accept", [None, False])
    async def test_not_ready_is_rejected_unchanged(
        self, match_service, scorer, alice, bob, photo_p1, accept
    ):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        if accept is False:
            await match_service.respond_to_match(match.id, bob.id, accept=False)
        status_before = match.status

        with pytest.raises(BadRequestError, match="not ready"):
            await match_service.compare_match(match.id, alice.id)

        assert match.status == status_before
        assert match.creator_score is None
        scorer.analyze_face.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_completed_match_cannot_be_compared_again(
        self, match_service, scorer, alice, bob, photo_p1, photo_p2
    ):
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)
        scorer.analyze_face.side_effect = [10.0, 20.0]
        await match_service.compare_match(match.id, alice.id)

        with pytest.raises(BadRequestError):
            await match_service.compare_match(match.id, alice.id)
        assert match.creator_score == 10.0
        assert match.invited_score == 20.0
        assert bob.score == 1

    @pytest.mark.asyncio
    async def test_only_creator_may_compare(self, match_service, scorer, alice, bob, photo_p1, photo_p2):
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)
        with pytest.raises(ForbiddenError):
            await match_service.compare_match(match.id, bob.id)
        scorer.analyze_face.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_completion_not_double_counted(
        self, match_service, match_store, scorer, alice, bob, photo_p1, photo_p2
    ):
        """If another compare completes the match while this one is scoring,
        the losing call must not write scores or credit anyone."""
        match = await self._ready_match(match_service, alice, "bob", bob, photo_p1, photo_p2)

        async def score_and_race(photo):
            if photo == photo_p2:
                # The other request finishes first.
                match.status = MatchStatus.COMPLETED.value
                match.creator_score, match.invited_score = 1.0, 2.0
                return 99.0
            return 10.0

        scorer.analyze_face.side_effect = score_and_race

        with pytest.raises(BadRequestError):
            await match_service.compare_match(match.id, alice.id)

        assert match.creator_score == 1.0
        assert match.invited_score == 2.0
        assert alice.score == 0
        assert bob.score == 0


class TestPickWinner:
    """Tests for the pinned winner rule."""

    def test_strictly_greater_creator_wins(self):
        match = type("M", (), {"creator_id": 1, "invited_id": 2})()
        assert pick_winner(match, 80.001, 80.0) == 1

    def test_lower_creator_loses(self):
        match = type("M", (), {"creator_id": 1, "invited_id": 2})()
        assert pick_winner(match, 79.0, 80.0) == 2

    def test_equal_scores_favour_invitee(self):
        match = type("M", (), {"creator_id": 1, "invited_id": 2})()
        assert pick_winner(match, 80.0, 80.0) == 2


class TestRetrieval:
    """Tests for listing, viewing and deleting matches."""

    @pytest.mark.asyncio
    async def test_get_match_visible_to_participants_only(
        self, match_service, alice, bob, carol, photo_p1
    ):
        match = await match_service.create_match(alice.id, "bob", photo_p1)
        assert (await match_service.get_match(match.id, alice.id)).id == match.id
        assert (await match_service.get_match(match.id, bob.id)).id == match.id
        with pytest.raises(ForbiddenError):
            await match_service.get_match(match.id, carol.id)
        with pytest.raises(NotFoundError):
            await match_service.get_match(12345, alice.id)

    @pytest.mark.asyncio
    async def test_user_matches_cover_both_roles(self, match_service, alice, bob, carol, photo_p1):
        m1 = await match_service.create_match(alice.id, "bob", photo_p1)
        m2 = await match_service.create_match(carol.id, "alice", photo_p1)
        m3 = await match_service.create_match(bob.id, "carol", photo_p1)

        ids = [m.id for m in await match_service.get_user_matches(alice.id)]
        assert ids == [m2.id, m1.id]
        assert m3.id not in ids

    @pytest.mark.asyncio
    async def test_delete_removes_only_users_matches(
        self, match_service, match_store, alice, bob, carol, photo_p1
    ):
        await match_service.create_match(alice.id, "bob", photo_p1)
        await match_service.create_match(bob.id, "alice", photo_p1)
        other = await match_service.create_match(bob.id, "carol", photo_p1)

        deleted = await match_service.delete_user_matches(alice.id)

        assert deleted == 2
        assert await match_service.get_user_matches(alice.id) == []
        assert list(match_store.matches) == [other.id]
