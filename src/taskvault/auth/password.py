"""Password hashing utilities.

The salt is generated once per user and stored next to the hash. To verify,
the hash is recomputed from the stored salt and the supplied password, then
compared byte-for-byte in constant time. The plaintext is never stored and
the stored hash is never compared with ``==``.

bcrypt only looks at the first 72 bytes of a password, so longer inputs
are truncated before hashing.
"""

import secrets

import bcrypt

from taskvault.config import settings


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:72]


def generate_salt(rounds: int | None = None) -> str:
    """Return a fresh random bcrypt salt (cost factor embedded)."""
    return bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds).decode("utf-8")


def hash_password(password: str, salt: str) -> str:
    """Derive the password hash for ``password`` under ``salt``."""
    return bcrypt.hashpw(_encode(password), salt.encode("utf-8")).decode("utf-8")


def verify_password(password: str, salt: str, password_hash: str) -> bool:
    """Recompute the hash from ``salt`` and compare it in constant time."""
    try:
        candidate = hash_password(password, salt)
    except ValueError:
        # Malformed salt in storage
        return False
    return secrets.compare_digest(
        candidate.encode("utf-8"), password_hash.encode("utf-8")
    )
