"""
Compare AI — Face++ scoring client

Sends one base64-encoded photo to the Face++ ``detect`` endpoint with the
``beauty`` attribute requested and turns the response into a single number:

    score = (beauty.male_score + beauty.female_score) / 2

taken from the first detected face and rounded to three decimals (the
precision of the ``matches`` score columns).  Any failure (transport error,
non-2xx status, malformed body, no face) is raised as ``FaceScorerError``
carrying the most specific message available, usually Face++'s own
``error_message``.  Calls are never retried here.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog

from app.config import Settings
from app.errors import ExternalServiceError

logger = structlog.get_logger("compare_ai.face_scorer")


class FaceScorerError(ExternalServiceError):
    """The external face-analysis call failed."""


class FaceScorer(Protocol):
    async def analyze_face(self, photo_base64: str) -> float: ...


class FacePlusPlusScorer:
    """``FaceScorer`` backed by the Face++ detect API.

    The underlying ``httpx.AsyncClient`` is shared across calls; close it with
    :meth:`aclose` on shutdown.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        detect_url: str,
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._detect_url = detect_url
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: Settings) -> FacePlusPlusScorer:
        return cls(
            api_key=settings.FACEPP_API_KEY,
            api_secret=settings.FACEPP_API_SECRET,
            detect_url=settings.FACEPP_DETECT_URL,
            timeout_seconds=settings.SCORER_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def analyze_face(self, photo_base64: str) -> float:
        """Return the beauty score of the first face in ``photo_base64``.

        Raises
        ------
        FaceScorerError
            If the request fails or the response carries no usable face.
        """
        form = {
            "api_key": self._api_key,
            "api_secret": self._api_secret,
            "image_base64": photo_base64,
            "return_attributes": "beauty",
        }

        try:
            response = await self._client.post(self._detect_url, data=form)
        except httpx.TimeoutException as exc:
            logger.warning("scorer_call_timeout", error=str(exc))
            raise FaceScorerError("Face analysis request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("scorer_call_failed", error=str(exc))
            raise FaceScorerError(f"Face analysis request failed: {exc}") from exc

        payload = self._decode(response)

        if response.is_error:
            message = payload.get("error_message") or f"HTTP {response.status_code}"
            logger.warning(
                "scorer_api_error",
                status=response.status_code,
                error_message=message,
            )
            raise FaceScorerError(f"Face++ API error: {message}")

        score = self._extract_score(payload)
        logger.info(
            "scorer_call_complete",
            score=score,
            face_count=len(payload.get("faces") or []),
        )
        return score

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise FaceScorerError(
                f"Face++ returned an unreadable response (HTTP {response.status_code})"
            ) from exc
        if not isinstance(payload, dict):
            raise FaceScorerError("Face++ returned an unexpected response shape")
        return payload

    @staticmethod
    def _extract_score(payload: dict[str, Any]) -> float:
        faces = payload.get("faces") or []
        if not faces:
            raise FaceScorerError("No face detected in the image")

        beauty = (faces[0].get("attributes") or {}).get("beauty")
        if not beauty:
            raise FaceScorerError("Face++ response did not include a beauty score")

        try:
            male = float(beauty["male_score"])
            female = float(beauty["female_score"])
        except (KeyError, TypeError, ValueError) as exc:
            raise FaceScorerError("Face++ returned a malformed beauty score") from exc

        return round((male + female) / 2.0, 3)
