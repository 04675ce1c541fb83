"""Credential store — user records, username uniqueness, password checks.

The unique index on users.username is the only thing that decides a
sign-up race. register() never checks-then-inserts: it inserts and maps a
unique violation to DuplicateUsernameError, so two concurrent sign-ups for
the same name end with one success and one clean conflict.

verify() returns the same thing (None) for "no such user" and "wrong
password", and spends a bcrypt round in both cases, so neither the result
nor the timing tells a caller which usernames exist.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.auth.password import generate_salt, hash_password, verify_password
from taskvault.db.models import User

logger = structlog.get_logger()

_UNIQUE_VIOLATION = "23505"

# Used to burn the same hashing cost when the username is unknown.
_DUMMY_SALT = generate_salt()
_DUMMY_HASH = hash_password("", _DUMMY_SALT)


class DuplicateUsernameError(Exception):
    """Raised when a username is already taken."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already exists")


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == _UNIQUE_VIOLATION
    # SQLite reports "UNIQUE constraint failed: users.username"
    return "unique" in str(orig).lower()


class CredentialStore:
    """Owns user identity records and password secrecy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, username: str, password: str) -> None:
        """Create a user with a fresh salt and salted hash.

        Raises:
            DuplicateUsernameError: if the username is already registered
        """
        salt = generate_salt()
        user = User(
            username=username,
            salt=salt,
            password_hash=hash_password(password, salt),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if _is_unique_violation(e):
                logger.info("auth.duplicate_username", username=username)
                raise DuplicateUsernameError(username) from e
            raise

        logger.info("auth.user_registered", username=username, user_id=str(user.id))

    async def verify(self, username: str, password: str) -> Optional[str]:
        """Return ``username`` if the password matches, otherwise None."""
        user = await self.get_user(username)
        if user is None:
            verify_password(password, _DUMMY_SALT, _DUMMY_HASH)
            return None

        if not verify_password(password, user.salt, user.password_hash):
            return None
        return user.username

    async def get_user(self, username: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.username == username)
        )
        return result.scalars().first()
