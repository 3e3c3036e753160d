"""
CodeVault Backend — Token Codec Unit Tests
===========================================

What:  Tests for TokenCodec.issue / TokenCodec.verify.
Why:   The codec is the only thing standing between a forged token and the data.
How:   Real PyJWT encoding with a fixed secret; the clock is injected so expiry
       boundaries are exact.

What we test:
    ✅ Round trip keeps subject and role, admin role from configuration
    ✅ Expired tokens (including exactly at exp) raise TokenExpiredError
    ✅ Expiry wins over a broken signature
    ✅ Tampered signature, wrong secret, alg=none raise InvalidSignatureError
    ✅ Garbage, missing claims and out-of-range expiry raise MalformedTokenError
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from codevault.services.token_service import (
    ROLE_ADMIN,
    ROLE_USER,
    InvalidSignatureError,
    MalformedTokenError,
    TokenCodec,
    TokenError,
    TokenExpiredError,
)

from conftest import forge_token

SECRET = "unit-test-secret-with-enough-length-for-hs256"
FIXED_NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


def _tamper_signature(token: str) -> str:
    header, payload, signature = token.split(".")
    raw = bytearray(jwt.utils.base64url_decode(signature.encode()))
    raw[0] ^= 0x01
    return ".".join([header, payload, jwt.utils.base64url_encode(bytes(raw)).decode()])


class TestTokenRoundTrip:
    def setup_method(self):
        self.codec = TokenCodec(secret=SECRET, admin_subject_ids=["root-user"])

    def test_issue_then_verify_returns_subject(self):
        token = self.codec.issue("user-123")
        identity = self.codec.verify(token)

        assert identity.subject_id == "user-123"
        assert identity.role == ROLE_USER
        assert identity.is_admin is False

    def test_admin_subject_gets_admin_role(self):
        identity = self.codec.verify(self.codec.issue("root-user"))

        assert identity.role == ROLE_ADMIN
        assert identity.is_admin is True

    def test_explicit_role_overrides_configuration(self):
        identity = self.codec.verify(self.codec.issue("user-123", role=ROLE_ADMIN))
        assert identity.is_admin is True

    def test_expiry_is_ttl_after_issue(self):
        issuing = TokenCodec(secret=SECRET, ttl_seconds=600, clock=lambda: FIXED_NOW)
        checking = TokenCodec(
            secret=SECRET, clock=lambda: FIXED_NOW + timedelta(seconds=599)
        )
        identity = checking.verify(issuing.issue("user-123"))
        assert identity.expires_at == FIXED_NOW + timedelta(seconds=600)


class TestTokenExpiry:
    def test_token_from_two_hours_ago_is_expired(self):
        past = TokenCodec(
            secret=SECRET,
            clock=lambda: datetime.now(timezone.utc) - timedelta(hours=2),
        )
        current = TokenCodec(secret=SECRET)

        with pytest.raises(TokenExpiredError):
            current.verify(past.issue("user-123"))

    def test_token_expires_exactly_at_exp(self):
        issuing = TokenCodec(secret=SECRET, ttl_seconds=60, clock=lambda: FIXED_NOW)
        at_expiry = TokenCodec(secret=SECRET, clock=lambda: FIXED_NOW + timedelta(seconds=60))

        with pytest.raises(TokenExpiredError):
            at_expiry.verify(issuing.issue("user-123"))

    def test_expired_token_with_bad_signature_reports_expiry(self):
        issuing = TokenCodec(secret=SECRET, ttl_seconds=60, clock=lambda: FIXED_NOW)
        later = TokenCodec(secret=SECRET, clock=lambda: FIXED_NOW + timedelta(hours=1))
        token = _tamper_signature(issuing.issue("user-123"))

        with pytest.raises(TokenExpiredError):
            later.verify(token)


class TestTokenSignature:
    def setup_method(self):
        self.codec = TokenCodec(secret=SECRET)

    def test_tampered_signature_rejected(self):
        token = _tamper_signature(self.codec.issue("user-123"))

        with pytest.raises(InvalidSignatureError):
            self.codec.verify(token)

    def test_tampered_payload_rejected(self):
        header, _, signature = self.codec.issue("user-123").split(".")
        forged_payload = jwt.utils.base64url_encode(
            b'{"sub":"someone-else","role":"admin","exp":4102444800}'
        ).decode()

        with pytest.raises(InvalidSignatureError):
            self.codec.verify(".".join([header, forged_payload, signature]))

    def test_token_signed_with_other_secret_rejected(self):
        other = TokenCodec(secret="a-completely-different-secret-value-here")

        with pytest.raises(InvalidSignatureError):
            self.codec.verify(other.issue("user-123"))

    def test_unsigned_token_rejected(self):
        exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
        token = jwt.encode({"sub": "user-123", "exp": exp}, None, algorithm="none")

        with pytest.raises(InvalidSignatureError):
            self.codec.verify(token)


class TestMalformedTokens:
    def setup_method(self):
        self.codec = TokenCodec(secret=SECRET)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "not.a.token.at.all"])
    def test_garbage_is_malformed(self, token):
        with pytest.raises(MalformedTokenError):
            self.codec.verify(token)

    def test_missing_subject_is_malformed(self):
        exp = int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())
        token = jwt.encode({"exp": exp}, SECRET, algorithm="HS256")

        with pytest.raises(MalformedTokenError):
            self.codec.verify(token)

    def test_missing_expiry_is_malformed(self):
        token = jwt.encode({"sub": "user-123"}, SECRET, algorithm="HS256")

        with pytest.raises(MalformedTokenError):
            self.codec.verify(token)

    @pytest.mark.parametrize("expiry", [b"1e20", b"-1e20", b"Infinity", b"NaN"])
    def test_out_of_range_expiry_is_malformed(self, expiry):
        token = forge_token(b'{"sub":"user-123","exp":' + expiry + b"}")

        with pytest.raises(MalformedTokenError):
            self.codec.verify(token)

    def test_all_failures_share_a_base_class(self):
        with pytest.raises(TokenError) as exc_info:
            self.codec.verify("garbage")
        assert exc_info.value.reason == "malformed"


def test_empty_secret_rejected():
    with pytest.raises(ValueError):
        TokenCodec(secret="")
