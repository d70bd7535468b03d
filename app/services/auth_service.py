"""
Compare AI — Account registration and login

Passwords are stored as bcrypt hashes.  Login failures never reveal whether
the username or the password was wrong.
"""

from __future__ import annotations

import bcrypt
import structlog

from app.errors import BadRequestError, ConflictError, UnauthenticatedError
from app.models.user import User
from app.stores.user_store import UserStore

logger = structlog.get_logger("compare_ai.auth_service")


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


class AuthService:
    def __init__(self, user_store: UserStore) -> None:
        self.user_store = user_store

    async def register(
        self,
        username: str,
        password: str,
        accept_policy: bool,
    ) -> User:
        username = username.strip()
        if not username:
            raise BadRequestError("Username is required")
        if not password:
            raise BadRequestError("Password is required")
        if not accept_policy:
            raise BadRequestError("You must accept the privacy policy")

        if await self.user_store.get_by_username(username) is not None:
            logger.warning("register_duplicate_username", username=username)
            raise ConflictError("Username already exists")

        user = await self.user_store.create(username, hash_password(password))
        logger.info("user_registered", user_id=user.id)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        user = await self.user_store.get_by_username(username.strip())
        if user is None or not check_password(password, user.password_hash):
            logger.warning("login_failed", username=username)
            raise UnauthenticatedError("Invalid username or password")
        return user
