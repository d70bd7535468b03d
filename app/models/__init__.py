"""
Compare AI — ORM model registry.

Importing every model here ensures that ``Base.metadata.create_all`` (and any
other tool that inspects ``Base.metadata``) discovers all tables automatically.
"""

from app.models.user import User
from app.models.match import Match, MatchStatus
from app.models.feedback import Feedback

__all__ = [
    "User",
    "Match",
    "MatchStatus",
    "Feedback",
]
