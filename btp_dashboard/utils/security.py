"""Hashing utilities for passwords and bearer tokens."""
from __future__ import annotations

import hashlib
import secrets

from werkzeug.security import check_password_hash, generate_password_hash

PASSWORD_HASH_METHOD = "scrypt"


def hash_password(password: str, *, method: str = PASSWORD_HASH_METHOD) -> str:
    return generate_password_hash(password, method=method)


def verify_password(password: str, encoded: str) -> bool:
    """Check ``password`` against a stored hash; unknown formats never match."""

    if not encoded or "$" not in encoded:
        return False
    try:
        return check_password_hash(encoded, password)
    except ValueError:
        return False


def new_token() -> str:
    return secrets.token_urlsafe(32)


def token_digest(token: str) -> str:
    """Return the SHA-256 digest under which a bearer token is stored."""

    return hashlib.sha256(token.encode("utf-8")).hexdigest()
