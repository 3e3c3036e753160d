"""
CodeVault Backend — Code Route Handlers
========================================

What:  CRUD endpoints for the Code resource.
Who:   Every route here sits behind the auth gate, declared once on the router.

Request flow:
    Auth Gate → handler → CodeService (lookup → access policy) → store
    A rejected token stops the request at the gate: no session is opened
    and the store is never called.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from codevault.middleware.auth import require_identity
from codevault.schemas.code import CodeCreate, CodeResponse, CodeUpdate
from codevault.schemas.common import ConfirmationResponse, ErrorResponse
from codevault.services.code_service import CodeService
from codevault.services.token_service import IdentityClaim
from codevault.storage import DocumentStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/codes",
    tags=["Codes"],
    dependencies=[Depends(require_identity)],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


def get_code_service(request: Request) -> CodeService:
    return request.app.state.code_service


@router.get("", response_model=List[CodeResponse], summary="List codes")
async def list_codes(
    owner_id: Optional[str] = Query(
        default=None,
        description="Only return codes owned by this user id",
    ),
    identity: IdentityClaim = Depends(require_identity),
    store: DocumentStore = Depends(get_store),
    service: CodeService = Depends(get_code_service),
) -> List[CodeResponse]:
    return await service.list_codes(store, identity, owner_id=owner_id)


@router.post(
    "",
    status_code=201,
    response_model=CodeResponse,
    responses={400: {"description": "Missing field or unknown owner", "model": ErrorResponse}},
    summary="Create a code owned by the caller",
)
async def create_code(
    payload: CodeCreate,
    identity: IdentityClaim = Depends(require_identity),
    store: DocumentStore = Depends(get_store),
    service: CodeService = Depends(get_code_service),
) -> CodeResponse:
    return await service.create_code(store, identity, payload)


@router.get(
    "/{code_id}",
    response_model=CodeResponse,
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Code not found", "model": ErrorResponse},
    },
    summary="Get a single code by ID",
)
async def get_code(
    code_id: str,
    identity: IdentityClaim = Depends(require_identity),
    store: DocumentStore = Depends(get_store),
    service: CodeService = Depends(get_code_service),
) -> CodeResponse:
    return await service.get_code(store, identity, code_id)


@router.patch(
    "/{code_id}",
    response_model=ConfirmationResponse,
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Code not found", "model": ErrorResponse},
    },
    summary="Partially update a code",
)
async def update_code(
    code_id: str,
    payload: CodeUpdate,
    identity: IdentityClaim = Depends(require_identity),
    store: DocumentStore = Depends(get_store),
    service: CodeService = Depends(get_code_service),
) -> ConfirmationResponse:
    return await service.update_code(store, identity, code_id, payload)


@router.delete(
    "/{code_id}",
    response_model=ConfirmationResponse,
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Code not found", "model": ErrorResponse},
    },
    summary="Delete a code",
)
async def delete_code(
    code_id: str,
    identity: IdentityClaim = Depends(require_identity),
    store: DocumentStore = Depends(get_store),
    service: CodeService = Depends(get_code_service),
) -> ConfirmationResponse:
    return await service.delete_code(store, identity, code_id)
