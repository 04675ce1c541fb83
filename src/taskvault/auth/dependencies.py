"""FastAPI auth dependencies.

Used as Depends() in route handlers to turn the Bearer token on a request
into the caller's identity. Routes then hand that identity to the services
explicitly; nothing downstream reads "the current user" from ambient state.
"""

import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.auth.jwt import TokenError, verify_token
from taskvault.db.engine import get_db
from taskvault.db.models import User


class CurrentUser:
    """The authenticated user making the request."""

    def __init__(self, id: uuid.UUID, username: str):
        self.id = id
        self.username = username

    def __repr__(self) -> str:
        return f"CurrentUser(id={self.id!s}, username={self.username!r})"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """Resolve the Bearer token to a user (401 on any failure).

    The token only carries a username, so the user is looked up to make
    sure the account still exists and to get its id for ownership scoping.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise _unauthorized("Authentication required")

    try:
        payload = verify_token(authorization[7:])
    except TokenError as e:
        raise _unauthorized(str(e))

    result = await db.execute(
        select(User.id, User.username).where(User.username == payload["username"])
    )
    row = result.first()
    if row is None:
        raise _unauthorized("Invalid token: unknown user")

    return CurrentUser(id=row.id, username=row.username)
