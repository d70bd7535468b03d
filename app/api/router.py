"""
Compare AI — Main API Router

Aggregates all sub-routers under a single prefix so that ``app.main``
can mount the entire API surface with one ``include_router`` call.
"""

from fastapi import APIRouter

from app.api import auth, feedback, leaderboard, matches

router = APIRouter()

router.include_router(auth.router, tags=["Auth"])
router.include_router(matches.router, prefix="/matches", tags=["Matches"])
router.include_router(leaderboard.router, prefix="/leaderboard", tags=["Leaderboard"])
router.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])
