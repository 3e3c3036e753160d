"""
CodeVault Backend — Auth Gate
==============================

What:  Admits or rejects requests to protected routes based on their bearer token.
Why:   Handlers behind the gate can rely on a verified IdentityClaim being present.
How:   A FastAPI dependency rather than a BaseHTTPMiddleware: protection is
       per-route, and dependencies declared on a router are resolved before the
       route's own parameters. A rejected request therefore never opens a
       database session and never reaches the handler.
Who:   Declared on the /codes router, on user mutation routes and on /auth/me.

Per-request state machine:
    Unauthenticated → Checking → Authenticated (claim on request.state.identity)
                               → Rejected (UnauthenticatedError → 401)

Token sources, in order:
    1. Authorization: Bearer <token>
    2. ?token=<token>    (only when ALLOW_QUERY_TOKEN is enabled)

Every rejection raises the same UnauthenticatedError. The internal reason
(missing_token, expired, invalid_signature, malformed) goes to the log only.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from codevault.config import Settings
from codevault.exceptions import UnauthenticatedError
from codevault.middleware.request_id import request_id_var
from codevault.services.token_service import IdentityClaim, TokenCodec, TokenError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must go through our own error pipeline
bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
    config: Settings,
) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    if config.allow_query_token:
        return request.query_params.get(config.token_query_param) or None
    return None


async def require_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> IdentityClaim:
    """
    Verify the request's token and return the identity it carries.

    The codec and settings come from app.state, where create_app() put them.

    Raises:
        UnauthenticatedError: No token, or the codec rejected it (→ 401)
    """
    codec: TokenCodec = request.app.state.token_codec
    config: Settings = request.app.state.settings
    rid = request_id_var.get("")

    token = _extract_token(request, credentials, config)
    if token is None:
        logger.info("[%s] Rejected %s %s: missing_token", rid, request.method, request.url.path)
        raise UnauthenticatedError(context={"reason": "missing_token"})

    try:
        identity = codec.verify(token)
    except TokenError as e:
        logger.info(
            "[%s] Rejected %s %s: %s (%s)",
            rid, request.method, request.url.path, e.reason, str(e),
        )
        raise UnauthenticatedError(context={"reason": e.reason}) from e

    request.state.identity = identity
    return identity


async def optional_user_read_gate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[IdentityClaim]:
    """Gate user reads only when PROTECT_USER_READS is enabled."""
    config: Settings = request.app.state.settings
    if not config.protect_user_reads:
        return None
    return await require_identity(request, credentials)
