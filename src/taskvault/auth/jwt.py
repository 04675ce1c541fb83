"""JWT token creation and verification.

Tokens are stateless: the payload carries only the username, plus the
``iat``/``exp`` claims PyJWT uses to enforce the validity window.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from taskvault.config import settings


class TokenError(Exception):
    """Raised when token verification fails."""


def create_access_token(
    username: str,
    expires_minutes: Optional[int] = None,
) -> str:
    """Sign a session token for ``username``."""
    now = datetime.now(timezone.utc)
    payload = {
        "username": username,
        "iat": now,
        "exp": now + timedelta(
            minutes=expires_minutes or settings.access_token_expire_minutes
        ),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict:
    """Verify and decode a JWT token.

    Returns the payload dict on success.
    Raises TokenError on failure, including a missing username claim.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "username"]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")
    return payload
