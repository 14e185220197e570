"""Tests for password hashing and signed claims."""

from __future__ import annotations

import pytest
from jose import jwt

from cubby.auth.passwords import hash_password, verify_password
from cubby.auth.tokens import ALGORITHM, SUBJECT, Claim, TokenSigner, cookie_directive
from cubby.exceptions import AuthError, AuthErrorKind

T0 = 1_700_000_000
HOUR = 3600


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def signer(clock: FakeClock) -> TokenSigner:
    return TokenSigner("unit-test-secret", clock=clock)


class TestPasswords:
    def test_round_trip(self):
        hashed = hash_password("secret123")
        assert hashed.startswith("$argon2")
        assert verify_password("secret123", hashed) is True

    def test_wrong_password(self):
        assert verify_password("wrong", hash_password("secret123")) is False

    def test_fresh_salt_each_call(self):
        assert hash_password("secret123") != hash_password("secret123")

    @pytest.mark.parametrize("bad_hash", ["", "not-a-hash", "$argon2id$v=19$garbage"])
    def test_malformed_hash_never_matches(self, bad_hash: str):
        assert verify_password("secret123", bad_hash) is False


class TestIssue:
    def test_claim_fields(self, signer: TokenSigner):
        claim, token = signer.issue("alice")
        assert claim == Claim(sub=SUBJECT, username="alice", exp=T0 + 86400)
        payload = jwt.get_unverified_claims(token)
        assert payload == {"sub": "file", "username": "alice", "exp": T0 + 86400}

    def test_cookie_directive(self):
        assert cookie_directive("abc") == "Authorization=Bearer abc; Max-Age=86400"


class TestVerify:
    def test_immediately_valid(self, signer: TokenSigner):
        claim, token = signer.issue("alice")
        assert signer.verify(token) == claim

    def test_valid_after_one_hour(self, signer: TokenSigner, clock: FakeClock):
        _, token = signer.issue("alice")
        clock.now = T0 + HOUR
        assert signer.verify(token).username == "alice"

    def test_valid_at_exact_expiry(self, signer: TokenSigner, clock: FakeClock):
        _, token = signer.issue("alice")
        clock.now = T0 + 24 * HOUR
        assert signer.verify(token).username == "alice"

    def test_expired_after_25_hours(self, signer: TokenSigner, clock: FakeClock):
        _, token = signer.issue("alice")
        clock.now = T0 + 25 * HOUR
        with pytest.raises(AuthError) as exc_info:
            signer.verify(token)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN

    def test_foreign_key_rejected(self, signer: TokenSigner, clock: FakeClock):
        _, token = TokenSigner("other-secret", clock=clock).issue("alice")
        with pytest.raises(AuthError) as exc_info:
            signer.verify(token)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN

    def test_tampered_payload_rejected(self, signer: TokenSigner):
        _, token = signer.issue("alice")
        header, _, signature = token.split(".")
        forged = jwt.encode(
            {"sub": "file", "username": "root", "exp": T0 + 86400},
            "guess",
            algorithm=ALGORITHM,
        ).split(".")[1]
        with pytest.raises(AuthError):
            signer.verify(f"{header}.{forged}.{signature}")

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_garbage_rejected(self, signer: TokenSigner, token: str):
        with pytest.raises(AuthError) as exc_info:
            signer.verify(token)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN

    def test_missing_username_rejected(self, signer: TokenSigner):
        token = jwt.encode(
            {"sub": "file", "exp": T0 + 10}, "unit-test-secret", algorithm=ALGORITHM
        )
        with pytest.raises(AuthError):
            signer.verify(token)

    def test_missing_exp_rejected(self, signer: TokenSigner):
        token = jwt.encode(
            {"sub": "file", "username": "alice"}, "unit-test-secret", algorithm=ALGORITHM
        )
        with pytest.raises(AuthError):
            signer.verify(token)

    def test_other_subject_rejected(self, signer: TokenSigner):
        token = jwt.encode(
            {"sub": "admin", "username": "alice", "exp": T0 + 10},
            "unit-test-secret",
            algorithm=ALGORITHM,
        )
        with pytest.raises(AuthError) as exc_info:
            signer.verify(token)
        assert exc_info.value.kind is AuthErrorKind.INVALID_TOKEN
