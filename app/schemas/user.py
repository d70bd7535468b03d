from pydantic import Field

from app.schemas.base import CamelModel


class UserRegister(CamelModel):
    username: str = Field(max_length=64)
    password: str = Field(max_length=256)
    accept_policy: bool = False


class UserLogin(CamelModel):
    username: str
    password: str


class UserResponse(CamelModel):
    id: int
    username: str
    score: int


class LeaderboardEntry(CamelModel):
    username: str
    score: int
