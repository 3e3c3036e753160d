"""
CodeVault Backend — Token Codec
================================

What:  Issues and verifies the signed bearer tokens presented on protected routes.
Why:   Tokens are stateless: nothing is stored server-side, so the signature
       and the embedded expiry are the only things that make a token valid.
How:   PyJWT with an HMAC secret. Claims: sub (subject id), role, iat, exp.
Who:   Built once by the app factory (app.state.token_codec); used by the auth
       gate and by POST /auth/token.

Verification order:
    1. Parse header and payload without trusting them   → MalformedTokenError
    2. Require `sub` (string) and `exp` (number)          → MalformedTokenError
    3. Compare exp against the codec clock               → TokenExpiredError
    4. Check the signature with the configured algorithm → InvalidSignatureError

    Expiry is checked before the signature, so an expired token is reported
    as expired whether or not its signature is intact. Callers outside the
    codec never see the difference: the auth gate folds every TokenError
    into a single 401.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

import jwt
from pydantic import BaseModel

from codevault.config import Settings

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ADMIN = "admin"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ══════════════════════════════════════════════════════════════════════════
# Models
# ══════════════════════════════════════════════════════════════════════════

class IdentityClaim(BaseModel):
    """
    The verified content of a token. Lives for one request only.

    `role` is an explicit claim; admin rights are never inferred from the
    subject id itself.
    """

    subject_id: str
    role: str = ROLE_USER
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


# ══════════════════════════════════════════════════════════════════════════
# Errors
# ══════════════════════════════════════════════════════════════════════════

class TokenError(Exception):
    """Base exception for token verification failures."""

    reason = "invalid"


class TokenExpiredError(TokenError):
    """Token expiry is at or before the current time."""

    reason = "expired"


class InvalidSignatureError(TokenError):
    """Signature does not match the secret, or the algorithm is not allowed."""

    reason = "invalid_signature"


class MalformedTokenError(TokenError):
    """Token cannot be parsed into the expected structure."""

    reason = "malformed"


# ══════════════════════════════════════════════════════════════════════════
# Codec
# ══════════════════════════════════════════════════════════════════════════

class TokenCodec:
    """
    Encodes and verifies signed identity tokens.

    Args:
        secret:            HMAC signing key (process-wide, read-only after startup)
        algorithm:         JWS algorithm, HS256 by default
        ttl_seconds:       Lifetime of an issued token
        admin_subject_ids: Subjects that get the admin role on issue
        clock:             Returns "now" as an aware datetime; injectable for tests
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl_seconds: int = 3600,
        admin_subject_ids: Iterable[str] = (),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self._admin_subject_ids = frozenset(admin_subject_ids)
        self._clock = clock or utc_now

    def issue(self, subject_id: str, role: Optional[str] = None) -> str:
        """Produce a signed token for `subject_id`, valid for ttl_seconds."""
        now = self._clock()
        if role is None:
            role = ROLE_ADMIN if subject_id in self._admin_subject_ids else ROLE_USER
        payload = {
            "sub": str(subject_id),
            "role": role,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> IdentityClaim:
        """
        Verify `token` and return its identity claim.

        Raises:
            MalformedTokenError:   Not a JWT, `sub`/`exp` missing or mistyped, or `exp`
                                   not representable as a date
            TokenExpiredError:     clock() >= exp
            InvalidSignatureError: Signature mismatch or disallowed algorithm
        """
        try:
            unverified = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(str(e)) from e

        subject = unverified.get("sub")
        expiry = unverified.get("exp")
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("Token has no subject")
        if isinstance(expiry, bool) or not isinstance(expiry, (int, float)):
            raise MalformedTokenError("Token has no numeric expiry")

        # exp is still unverified here: huge, negative or non-finite values must not escape
        try:
            expires_at = datetime.fromtimestamp(expiry, tz=timezone.utc)
        except (OverflowError, ValueError, OSError) as e:
            raise MalformedTokenError("Token expiry is out of range") from e
        if self._clock() >= expires_at:
            raise TokenExpiredError("Token has expired")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # Expiry was checked above against the codec clock
                options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise InvalidSignatureError(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise MalformedTokenError(str(e)) from e

        role = payload.get("role", ROLE_USER)
        return IdentityClaim(
            subject_id=subject,
            role=role if isinstance(role, str) else ROLE_USER,
            expires_at=expires_at,
        )


def build_token_codec(config: Settings) -> TokenCodec:
    """Build the process-wide codec from settings."""
    return TokenCodec(
        secret=config.jwt_secret,
        algorithm=config.jwt_algorithm,
        ttl_seconds=config.token_ttl_seconds,
        admin_subject_ids=config.admin_subject_ids_list,
    )
