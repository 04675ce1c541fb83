"""Authentication primitives.

- password: salted bcrypt hashing with constant-time verification
- jwt: signing and verifying session tokens (payload = username)
- dependencies: FastAPI dependency resolving a Bearer token to a user
"""
