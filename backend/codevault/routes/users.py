"""
CodeVault Backend — User Route Handlers
========================================

What:  CRUD endpoints for the User resource.
How:   Extracts path/body data, delegates to UserService, returns JSON.
       Failures are raised, never rendered here (see error_handlers.py).

Protection (defaults):
    GET    /users          open (gated when PROTECT_USER_READS=true)
    POST   /users          open, so a new user can register
    GET    /users/{id}     open (gated when PROTECT_USER_READS=true)
    PATCH  /users/{id}     bearer token of that user or an admin
    DELETE /users/{id}     bearer token of that user or an admin
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from codevault.middleware.auth import optional_user_read_gate, require_identity
from codevault.schemas.common import ConfirmationResponse, ErrorResponse
from codevault.schemas.user import UserCreate, UserResponse, UserUpdate
from codevault.services.token_service import IdentityClaim
from codevault.services.user_service import UserService
from codevault.storage import DocumentStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


@router.get(
    "",
    response_model=List[UserResponse],
    dependencies=[Depends(optional_user_read_gate)],
    summary="List all users",
)
async def list_users(
    store: DocumentStore = Depends(get_store),
    service: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    return await service.list_users(store)


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    responses={
        400: {"description": "Missing or invalid field", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create a user",
)
async def create_user(
    payload: UserCreate,
    store: DocumentStore = Depends(get_store),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """Returns the stored user, including its generated id (HTTP 201)."""
    return await service.create_user(store, payload)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(optional_user_read_gate)],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a single user by ID",
)
async def get_user(
    user_id: str,
    store: DocumentStore = Depends(get_store),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return await service.get_user(store, user_id)


@router.patch(
    "/{user_id}",
    response_model=ConfirmationResponse,
    dependencies=[Depends(require_identity)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not this user", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Partially update a user",
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    identity: IdentityClaim = Depends(require_identity),
    store: DocumentStore = Depends(get_store),
    service: UserService = Depends(get_user_service),
) -> ConfirmationResponse:
    return await service.update_user(store, identity, user_id, payload)


@router.delete(
    "/{user_id}",
    response_model=ConfirmationResponse,
    dependencies=[Depends(require_identity)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not this user", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Delete a user",
)
async def delete_user(
    user_id: str,
    identity: IdentityClaim = Depends(require_identity),
    store: DocumentStore = Depends(get_store),
    service: UserService = Depends(get_user_service),
) -> ConfirmationResponse:
    return await service.delete_user(store, identity, user_id)
