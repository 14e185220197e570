"""Authentication — password hashing, signed claims, account operations."""

from cubby.auth.gateway import AUTH_COOKIE, AuthGateway, AuthToken
from cubby.auth.passwords import hash_password, verify_password
from cubby.auth.tokens import Claim, TokenSigner, cookie_directive

__all__ = [
    "AUTH_COOKIE",
    "AuthGateway",
    "AuthToken",
    "Claim",
    "TokenSigner",
    "cookie_directive",
    "hash_password",
    "verify_password",
]
