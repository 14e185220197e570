"""Argon2 password hashing."""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()


def hash_password(plain: str) -> str:
    """Hash *plain* with a fresh random salt embedded in the result."""
    return _hasher.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """True iff *plain* matches *hashed*.  A malformed hash never matches."""
    try:
        return _hasher.verify(hashed, plain)
    except (VerificationError, InvalidHashError):
        return False
