"""
CodeVault Backend — Auth Route Handlers
========================================

What:  Token issuance and identity introspection.

POST /auth/token:
    Exchanges the email of an existing user for a bearer token. Users carry
    no password in this data model, so knowing a registered email is the
    whole credential; deployments that need more put a real identity
    provider in front and only use the gate.

GET /auth/me:
    Echoes the identity the gate decoded from the caller's token.
"""

import logging

from fastapi import APIRouter, Depends, Request

from codevault.exceptions import UnauthenticatedError
from codevault.middleware.auth import require_identity
from codevault.routes.users import get_user_service
from codevault.schemas.common import (
    ErrorResponse,
    IdentityResponse,
    TokenRequest,
    TokenResponse,
)
from codevault.services.token_service import IdentityClaim, TokenCodec
from codevault.services.user_service import UserService
from codevault.storage import DocumentStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/token",
    response_model=TokenResponse,
    responses={401: {"description": "Unknown email", "model": ErrorResponse}},
    summary="Issue a bearer token for a registered user",
)
async def issue_token(
    payload: TokenRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
    service: UserService = Depends(get_user_service),
) -> TokenResponse:
    user = await service.find_by_email(store, payload.email)
    if user is None:
        raise UnauthenticatedError(context={"reason": "unknown_email"})

    codec: TokenCodec = request.app.state.token_codec
    token = codec.issue(user["id"])
    logger.info("Issued token for user %s", user["id"])
    return TokenResponse(access_token=token, expires_in=codec.ttl_seconds)


@router.get(
    "/me",
    response_model=IdentityResponse,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Show the identity carried by the caller's token",
)
async def who_am_i(identity: IdentityClaim = Depends(require_identity)) -> IdentityResponse:
    return IdentityResponse(
        subject_id=identity.subject_id,
        role=identity.role,
        expires_at=identity.expires_at,
    )
