"""Password hashing for storefront accounts."""

from __future__ import annotations

import bcrypt

MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


def password_problem(password: str) -> str | None:
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"password must be at least {MIN_PASSWORD_LENGTH} characters"
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return f"password must be at most {MAX_PASSWORD_BYTES} bytes"
    return None


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt; malformed stored hashes count as a mismatch."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


__all__ = ["MIN_PASSWORD_LENGTH", "hash_password", "password_problem", "verify_password"]
