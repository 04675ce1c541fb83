"""Auth service — sign-up and sign-in on top of the credential store.

This is the only place that issues session tokens. Sign-in failures are
deliberately generic: the caller learns that the credentials were rejected,
never which half of them was wrong.
"""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.auth.jwt import create_access_token
from taskvault.services.credential_store import CredentialStore

logger = structlog.get_logger()


class InvalidCredentialsError(Exception):
    """Raised when a username/password pair does not authenticate."""

    def __init__(self):
        super().__init__("Invalid credentials")


class AuthService:
    """Registers users and exchanges credentials for session tokens."""

    def __init__(self, db: AsyncSession):
        self.credentials = CredentialStore(db)

    async def sign_up(self, username: str, password: str) -> None:
        """Register a new user.

        Raises:
            DuplicateUsernameError: if the username is taken
        """
        await self.credentials.register(username, password)

    async def sign_in(self, username: str, password: str) -> str:
        """Verify credentials and return a signed access token.

        Raises:
            InvalidCredentialsError: on unknown user or wrong password
        """
        verified = await self.credentials.verify(username, password)
        if not verified:
            logger.info("auth.signin_failed", username=username)
            raise InvalidCredentialsError()

        logger.info("auth.signed_in", username=verified)
        return create_access_token(verified)
