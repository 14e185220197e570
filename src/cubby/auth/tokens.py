"""Signed session claims (HS256 JWT)."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any

from jose import jwt
from jose.exceptions import JOSEError

from cubby.config import TOKEN_TTL_SECONDS
from cubby.exceptions import AuthError, AuthErrorKind

SUBJECT = "file"
ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Claim:
    """Verified session payload.  Never persisted."""

    sub: str
    username: str
    exp: int


def cookie_directive(token: str, max_age: int = TOKEN_TTL_SECONDS) -> str:
    """``Set-Cookie`` value carrying *token* in the ``Authorization`` cookie."""
    return f"Authorization={BEARER_PREFIX}{token}; Max-Age={max_age}"


class TokenSigner:
    """Issues and verifies claims with a shared secret.

    Expiry is checked against ``clock`` on every ``verify`` call;
    a claim is expired once ``exp < now``.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl: int = TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = secret
        self.ttl = ttl
        self._clock = clock

    def now(self) -> int:
        return int(self._clock())

    def issue(self, username: str) -> tuple[Claim, str]:
        claim = Claim(sub=SUBJECT, username=username, exp=self.now() + self.ttl)
        try:
            token = jwt.encode(asdict(claim), self._secret, algorithm=ALGORITHM)
        except JOSEError as e:
            raise AuthError(AuthErrorKind.TOKEN_CREATION, str(e)) from e
        return claim, token

    def verify(self, token: str) -> Claim:
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False},
            )
        except JOSEError as e:
            raise AuthError(AuthErrorKind.INVALID_TOKEN, str(e)) from e

        sub = payload.get("sub")
        username = payload.get("username")
        exp = payload.get("exp")
        if (
            not isinstance(sub, str)
            or not isinstance(username, str)
            or not isinstance(exp, int)
            or isinstance(exp, bool)
        ):
            raise AuthError(AuthErrorKind.INVALID_TOKEN, "Malformed claim")
        if sub != SUBJECT:
            raise AuthError(AuthErrorKind.INVALID_TOKEN, f"Unexpected subject: {sub!r}")
        if exp < self.now():
            raise AuthError(AuthErrorKind.INVALID_TOKEN, "Token expired")
        return Claim(sub=sub, username=username, exp=exp)
