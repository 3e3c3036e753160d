"""
CodeVault Backend — User Service
=================================

What:  Business logic for the User resource: create, list, get, update, delete.
How:   Validates configured required fields, delegates persistence to the
       DocumentStore and converts absent records into NotFoundError.
Who:   Called by the /users route handlers (routes/users.py) and by
       POST /auth/token for the email lookup.

Design Decision:
    UserService is stateless apart from its configuration. The store is
    passed to every call, so tests hand in a fake store and the HTTP layer
    hands in a SQLDocumentStore bound to the request's session.

Updating or deleting a user:
    Only the user themselves or an admin. The record id is the owner id
    handed to the access policy, checked after the lookup (404 before 403).

Deleting a user:
    Codes store their owner by id only. With cascade_delete off (default)
    they stay behind as orphans; with it on, they are removed after the user.
"""

import logging
from typing import Iterable, List, Optional

from codevault.exceptions import NotFoundError
from codevault.schemas.common import ConfirmationResponse
from codevault.schemas.user import UserCreate, UserResponse, UserUpdate
from codevault.services.access_policy import Operation, ensure_access
from codevault.services.fields import reject_nulled_required, require_fields
from codevault.services.token_service import IdentityClaim
from codevault.storage.base import DocumentStore, Entity, Record

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic layer for user operations.

    Args:
        required_fields: Fields a Create must carry (from USER_REQUIRED_FIELDS)
        cascade_delete:  Remove a user's codes together with the user
    """

    def __init__(
        self,
        required_fields: Iterable[str] = ("email", "name"),
        cascade_delete: bool = False,
    ):
        self.required_fields = tuple(required_fields)
        self.cascade_delete = cascade_delete

    async def _load(
        self,
        store: DocumentStore,
        identity: IdentityClaim,
        user_id: str,
        operation: Operation,
    ) -> Record:
        # A user owns their own record
        record = await store.find_by_id(Entity.USERS, user_id)
        if record is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        ensure_access(identity, record["id"], operation)
        return record

    async def create_user(self, store: DocumentStore, payload: UserCreate) -> UserResponse:
        """
        Create a user from the request body.

        Raises:
            ValidationError: A required field is missing or null (→ 400)
            ConflictError:   The email is already registered (→ 409)
        """
        fields = payload.model_dump(exclude_none=True)
        require_fields(fields, self.required_fields)

        record = await store.insert(Entity.USERS, fields)
        logger.info("User created: %s", record["id"])
        return UserResponse(**record)

    async def list_users(self, store: DocumentStore) -> List[UserResponse]:
        records = await store.find_all(Entity.USERS)
        return [UserResponse(**record) for record in records]

    async def get_user(self, store: DocumentStore, user_id: str) -> UserResponse:
        """Raises NotFoundError when no user has `user_id`."""
        record = await store.find_by_id(Entity.USERS, user_id)
        if record is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserResponse(**record)

    async def find_by_email(self, store: DocumentStore, email: str) -> Optional[Record]:
        records = await store.find_all(Entity.USERS, {"email": email})
        return records[0] if records else None

    async def update_user(
        self,
        store: DocumentStore,
        identity: IdentityClaim,
        user_id: str,
        payload: UserUpdate,
    ) -> ConfirmationResponse:
        """
        Apply the fields present in the body; others are left unchanged.

        Raises:
            NotFoundError:   Unknown user (→ 404)
            ForbiddenError:  Caller is neither this user nor an admin (→ 403)
            ValidationError: A required field is set to null (→ 400)
            ConflictError:   New email already taken (→ 409)
        """
        await self._load(store, identity, user_id, Operation.UPDATE)

        patch = payload.model_dump(exclude_unset=True)
        reject_nulled_required(patch, self.required_fields)

        if patch:
            updated = await store.update(Entity.USERS, user_id, patch)
            if updated is None:
                # Deleted between the lookup and the patch
                raise NotFoundError(resource="user", resource_id=user_id)
            logger.info("User %s updated by %s: %s", user_id, identity.subject_id, sorted(patch))

        return ConfirmationResponse(message="User updated", id=user_id)

    async def delete_user(
        self, store: DocumentStore, identity: IdentityClaim, user_id: str
    ) -> ConfirmationResponse:
        """Raises NotFoundError when the user does not exist (including a repeat delete)."""
        await self._load(store, identity, user_id, Operation.DELETE)

        if not await store.remove(Entity.USERS, user_id):
            raise NotFoundError(resource="user", resource_id=user_id)
        logger.info("User %s deleted by %s", user_id, identity.subject_id)

        if self.cascade_delete:
            codes = await store.find_all(Entity.CODES, {"owner_id": user_id})
            for code in codes:
                await store.remove(Entity.CODES, code["id"])
            logger.info("Removed %d codes owned by deleted user %s", len(codes), user_id)

        return ConfirmationResponse(message="User deleted", id=user_id)
