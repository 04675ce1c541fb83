"""Pydantic schemas for sign-up and sign-in.

The password policy only applies to sign-up. Sign-in accepts any string so
that a rejected login never hints at what a valid password looks like.
"""

import re
import uuid

from pydantic import BaseModel, Field, field_validator

_HAS_UPPER = re.compile(r"[A-Z]")
_HAS_LOWER = re.compile(r"[a-z]")
_HAS_DIGIT_OR_SPECIAL = re.compile(r"[\d\W]")


class SignUpRequest(BaseModel):
    username: str = Field(..., min_length=4, max_length=20)
    password: str = Field(..., min_length=8, max_length=20)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not (
            _HAS_UPPER.search(value)
            and _HAS_LOWER.search(value)
            and _HAS_DIGIT_OR_SPECIAL.search(value)
        ):
            raise ValueError("password too weak")
        return value


class SignInRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRead(BaseModel):
    id: uuid.UUID
    username: str

    model_config = {"from_attributes": True}
