"""Auth API tests.

Covers:
1. Sign-up + duplicate prevention + credential policy
2. Sign-in → JWT, with identical responses for every kind of failure
3. The Bearer token dependency behind /auth/me
"""

import pytest

from taskvault.auth.jwt import create_access_token


# ═══════════════════════════════════════════════════════════
# Sign-up
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_signup(client):
    """Sign-up returns 201 with no body."""
    r = await client.post(
        "/api/v1/auth/signup",
        json={"username": "alice", "password": "Secret123"},
    )
    assert r.status_code == 201
    assert r.content == b""


@pytest.mark.asyncio
async def test_signup_duplicate_username(client):
    """Can't register the same username twice, whatever the password."""
    r1 = await client.post(
        "/api/v1/auth/signup",
        json={"username": "alice", "password": "Secret123"},
    )
    assert r1.status_code == 201

    r2 = await client.post(
        "/api/v1/auth/signup",
        json={"username": "alice", "password": "Different9"},
    )
    assert r2.status_code == 409
    assert r2.json()["detail"] == "Username already exists"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "username,password",
    [
        ("abc", "Secret123"),          # username too short
        ("a" * 21, "Secret123"),       # username too long
        ("alice", "Sec1"),             # password too short
        ("alice", "Secret12" + "x" * 13),  # password too long
        ("alice", "secret123"),        # no upper case
        ("alice", "SECRET123"),        # no lower case
        ("alice", "SecretPass"),       # no digit or special character
    ],
)
async def test_signup_policy(client, username, password):
    r = await client.post(
        "/api/v1/auth/signup",
        json={"username": username, "password": password},
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_signup_special_character_satisfies_policy(client):
    r = await client.post(
        "/api/v1/auth/signup",
        json={"username": "alice", "password": "Secret!Pass"},
    )
    assert r.status_code == 201


# ═══════════════════════════════════════════════════════════
# Sign-in
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_signin_success(client):
    await client.post(
        "/api/v1/auth/signup",
        json={"username": "alice", "password": "Secret123"},
    )
    r = await client.post(
        "/api/v1/auth/signin",
        json={"username": "alice", "password": "Secret123"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["access_token"]
    assert body["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_signin_failures_are_identical(client):
    """Wrong password and unknown user produce the same 401 response."""
    await client.post(
        "/api/v1/auth/signup",
        json={"username": "alice", "password": "Secret123"},
    )
    wrong = await client.post(
        "/api/v1/auth/signin",
        json={"username": "alice", "password": "Wrong9999"},
    )
    unknown = await client.post(
        "/api/v1/auth/signin",
        json={"username": "nobody", "password": "Secret123"},
    )
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"detail": "Invalid credentials"}


@pytest.mark.asyncio
async def test_auth_responses_not_cached(client):
    r = await client.post(
        "/api/v1/auth/signin",
        json={"username": "nobody", "password": "whatever"},
    )
    assert r.headers["Cache-Control"] == "no-store"


# ═══════════════════════════════════════════════════════════
# Protected endpoint (/me)
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client, login):
    headers = await login("alice")
    r = await client.get("/api/v1/auth/me", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["username"] == "alice"
    assert "id" in body
    assert "salt" not in body
    assert "password_hash" not in body


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/api/v1/auth/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_with_invalid_token(client):
    r = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": "Bearer invalid_token_here"},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_me_with_expired_token(client, login):
    await login("alice")
    token = create_access_token("alice", expires_minutes=-1)
    r = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 401
    assert r.json()["detail"] == "Token has expired"


@pytest.mark.asyncio
async def test_me_with_token_for_unknown_user(client):
    """A validly signed token for a username that was never registered."""
    token = create_access_token("ghost")
    r = await client.get(
        "/api/v1/auth/me",
        headers={"Authorization": f"Bearer {token}"},
    )
    assert r.status_code == 401
