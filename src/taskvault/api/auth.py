"""Auth API — sign-up, sign-in, current user.

- POST /auth/signup → create an account (201, no body)
- POST /auth/signin → username/password → JWT access token
- GET /auth/me → the user behind the Bearer token
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from taskvault.auth.dependencies import CurrentUser, get_current_user
from taskvault.db.engine import get_db
from taskvault.schemas.auth import (
    SignInRequest,
    SignUpRequest,
    TokenResponse,
    UserRead,
)
from taskvault.services.auth_service import AuthService, InvalidCredentialsError
from taskvault.services.credential_store import DuplicateUsernameError

router = APIRouter(prefix="/auth")


def _auth_svc(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/signup", status_code=201, response_class=Response)
async def sign_up(body: SignUpRequest, svc: AuthService = Depends(_auth_svc)):
    """Create a new user account."""
    try:
        await svc.sign_up(body.username, body.password)
    except DuplicateUsernameError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return Response(status_code=201)


@router.post("/signin", response_model=TokenResponse)
async def sign_in(body: SignInRequest, svc: AuthService = Depends(_auth_svc)):
    """Exchange username and password for a JWT access token."""
    try:
        access_token = await svc.sign_in(body.username, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=UserRead)
async def get_me(user: CurrentUser = Depends(get_current_user)):
    """Get the current authenticated user's info."""
    return UserRead(id=user.id, username=user.username)
