"""AuthGateway — login, registration, password reset and claim extraction.

Stateless service: sessions come from the factory passed at
construction, one per operation.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from argon2.exceptions import HashingError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from cubby.exceptions import AuthError, AuthErrorKind
from cubby.models import User

from .passwords import hash_password, verify_password
from .tokens import BEARER_PREFIX, Claim, TokenSigner, cookie_directive

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

AUTH_COOKIE = "Authorization"


@dataclass(frozen=True)
class AuthToken:
    """Result of a successful login."""

    claim: Claim
    token: str
    cookie: str


class AuthGateway:
    """Issues claims for valid credentials and verifies incoming ones."""

    def __init__(
        self,
        sessions: Callable[[], AsyncSession],
        signer: TokenSigner,
        *,
        can_register: bool = True,
    ) -> None:
        self._sessions = sessions
        self._signer = signer
        self.can_register = can_register

    # ------------------------------------------------------------------
    # Storage helpers
    # ------------------------------------------------------------------

    async def _stored_hash(self, username: str) -> str | None:
        try:
            async with self._sessions() as session:
                result = await session.execute(
                    select(User.password_hash).where(User.username == username)
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("User lookup failed for %s: %s", username, e, exc_info=True)
            raise AuthError(AuthErrorKind.DATABASE_ERROR, str(e)) from e

    @staticmethod
    async def _hash(password: str) -> str:
        try:
            return await asyncio.to_thread(hash_password, password)
        except HashingError as e:
            raise AuthError(AuthErrorKind.TOKEN_CREATION, str(e)) from e

    # ------------------------------------------------------------------
    # Account operations
    # ------------------------------------------------------------------

    async def authorize(self, username: str, password: str) -> AuthToken:
        """Check credentials and issue a signed claim valid for the TTL."""
        if not username or not password:
            raise AuthError(AuthErrorKind.MISSING_CREDENTIALS)

        stored = await self._stored_hash(username)
        if stored is None or not await asyncio.to_thread(verify_password, password, stored):
            logger.info("Failed login for %s", username)
            raise AuthError(AuthErrorKind.WRONG_CREDENTIALS)

        claim, token = self._signer.issue(username)
        logger.debug("Issued token for %s (exp=%d)", username, claim.exp)
        return AuthToken(
            claim=claim,
            token=token,
            cookie=cookie_directive(token, self._signer.ttl),
        )

    async def register(self, username: str, password: str) -> None:
        """Create a user.  Duplicate usernames fail at the storage layer."""
        if not self.can_register:
            raise AuthError(AuthErrorKind.WRONG_CREDENTIALS, "Registration is disabled")
        if not username or not password:
            raise AuthError(AuthErrorKind.MISSING_CREDENTIALS)

        password_hash = await self._hash(password)
        try:
            async with self._sessions() as session:
                session.add(User(username=username, password_hash=password_hash))
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning("Registration failed for %s: %s", username, e)
            raise AuthError(AuthErrorKind.DATABASE_ERROR, str(e)) from e
        logger.info("Registered user %s", username)

    async def reset_password(self, claim: Claim, old_password: str, new_password: str) -> None:
        """Replace the hash for ``claim.username`` if *old_password* matches."""
        stored = await self._stored_hash(claim.username)
        if stored is None:
            raise AuthError(AuthErrorKind.DATABASE_ERROR, f"No user {claim.username!r}")
        if not await asyncio.to_thread(verify_password, old_password, stored):
            raise AuthError(AuthErrorKind.WRONG_CREDENTIALS)

        new_hash = await self._hash(new_password)
        try:
            async with self._sessions() as session:
                user = (
                    await session.execute(select(User).where(User.username == claim.username))
                ).scalar_one()
                user.password_hash = new_hash
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("Password update failed for %s: %s", claim.username, e, exc_info=True)
            raise AuthError(AuthErrorKind.DATABASE_ERROR, str(e)) from e
        logger.info("Password changed for %s", claim.username)

    # ------------------------------------------------------------------
    # Claim extraction
    # ------------------------------------------------------------------

    def authenticate(
        self,
        authorization: str | None,
        cookies: Mapping[str, str] | None = None,
    ) -> Claim:
        """Verify the claim carried by a request.

        A ``Bearer`` Authorization header wins; otherwise the
        ``Authorization`` cookie must hold ``"Bearer <token>"``.
        """
        token = _bearer_from_header(authorization)
        if token is None:
            cookie = (cookies or {}).get(AUTH_COOKIE)
            if cookie is None:
                raise AuthError(AuthErrorKind.MISSING_CREDENTIALS)
            if not cookie.startswith(BEARER_PREFIX):
                raise AuthError(AuthErrorKind.INVALID_TOKEN, "Cookie is not a bearer token")
            token = cookie[len(BEARER_PREFIX):]
        return self._signer.verify(token)


def _bearer_from_header(value: str | None) -> str | None:
    if not value:
        return None
    scheme, _, credentials = value.partition(" ")
    credentials = credentials.strip()
    if scheme.lower() != "bearer" or not credentials:
        return None
    return credentials
