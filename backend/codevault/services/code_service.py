"""
CodeVault Backend — Code Service
=================================

What:  Business logic for the Code resource, with ownership enforcement.
How:   Every single-record operation follows the same order:
           1. look the record up        → NotFoundError (404)
           2. check the access policy   → ForbiddenError (403)
           3. validate the body         → ValidationError (400)
           4. delegate to the store
Who:   Called by the /codes route handlers, always behind the auth gate.

Ownership:
    The owner of a new code is the authenticated identity. The owner must be
    an existing user at creation time; after that the store does not keep
    the two in sync (see UserService for delete behaviour).
"""

import logging
from typing import Iterable, List, Optional

from codevault.exceptions import NotFoundError, ValidationError
from codevault.schemas.code import CodeCreate, CodeResponse, CodeUpdate
from codevault.schemas.common import ConfirmationResponse
from codevault.services.access_policy import Operation, ensure_access
from codevault.services.fields import reject_nulled_required, require_fields
from codevault.services.token_service import IdentityClaim
from codevault.storage.base import DocumentStore, Entity, Record

logger = logging.getLogger(__name__)


class CodeService:
    """
    Business logic layer for code operations.

    Args:
        required_fields: Fields a Create must carry (from CODE_REQUIRED_FIELDS)
    """

    def __init__(self, required_fields: Iterable[str] = ("language", "body")):
        self.required_fields = tuple(required_fields)

    async def _load(
        self,
        store: DocumentStore,
        identity: IdentityClaim,
        code_id: str,
        operation: Operation,
    ) -> Record:
        record = await store.find_by_id(Entity.CODES, code_id)
        if record is None:
            raise NotFoundError(resource="code", resource_id=code_id)
        ensure_access(identity, record.get("owner_id"), operation)
        return record

    async def create_code(
        self, store: DocumentStore, identity: IdentityClaim, payload: CodeCreate
    ) -> CodeResponse:
        """
        Create a code owned by the requesting identity.

        Raises:
            ValidationError: Missing required field, or the owner is not a user (→ 400)
        """
        ensure_access(identity, None, Operation.CREATE)
        fields = payload.model_dump(exclude_none=True)
        require_fields(fields, self.required_fields)

        if await store.find_by_id(Entity.USERS, identity.subject_id) is None:
            raise ValidationError(
                message="Owner does not exist",
                field="owner_id",
                context={"subject_id": identity.subject_id},
            )

        fields["owner_id"] = identity.subject_id
        record = await store.insert(Entity.CODES, fields)
        logger.info("Code %s created for owner %s", record["id"], identity.subject_id)
        return CodeResponse(**record)

    async def list_codes(
        self,
        store: DocumentStore,
        identity: IdentityClaim,
        owner_id: Optional[str] = None,
    ) -> List[CodeResponse]:
        """All codes, or only those of `owner_id` when given. No pagination."""
        ensure_access(identity, None, Operation.READ_ALL)
        filters = {"owner_id": owner_id} if owner_id else None
        records = await store.find_all(Entity.CODES, filters)
        return [CodeResponse(**record) for record in records]

    async def get_code(
        self, store: DocumentStore, identity: IdentityClaim, code_id: str
    ) -> CodeResponse:
        record = await self._load(store, identity, code_id, Operation.READ_ONE)
        return CodeResponse(**record)

    async def update_code(
        self,
        store: DocumentStore,
        identity: IdentityClaim,
        code_id: str,
        payload: CodeUpdate,
    ) -> ConfirmationResponse:
        """Partial update; only keys present in the body change."""
        await self._load(store, identity, code_id, Operation.UPDATE)

        patch = payload.model_dump(exclude_unset=True)
        reject_nulled_required(patch, self.required_fields)

        if patch:
            updated = await store.update(Entity.CODES, code_id, patch)
            if updated is None:
                raise NotFoundError(resource="code", resource_id=code_id)
            logger.info("Code %s updated by %s: %s", code_id, identity.subject_id, sorted(patch))

        return ConfirmationResponse(message="Code updated", id=code_id)

    async def delete_code(
        self, store: DocumentStore, identity: IdentityClaim, code_id: str
    ) -> ConfirmationResponse:
        await self._load(store, identity, code_id, Operation.DELETE)

        if not await store.remove(Entity.CODES, code_id):
            raise NotFoundError(resource="code", resource_id=code_id)
        logger.info("Code %s deleted by %s", code_id, identity.subject_id)
        return ConfirmationResponse(message="Code deleted", id=code_id)
