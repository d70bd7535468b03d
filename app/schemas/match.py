from datetime import datetime
from typing import Optional

from app.schemas.base import CamelModel


class MatchResponse(CamelModel):
    id: int
    creator_id: int
    invited_id: int
    creator_photo: str
    invited_photo: Optional[str] = None
    creator_score: Optional[float] = None
    invited_score: Optional[float] = None
    status: str
    created_at: datetime


class CompareResponse(CamelModel):
    creator_score: float
    invited_score: float
