"""
CodeVault Backend — Resource Access Policy
===========================================

What:  Decides whether an authenticated identity may perform an operation
       on an ownership-bound resource.
How:   A pure function over (identity, owner id, operation). No store access,
       no side effects, so every rule is testable in isolation.
Who:   Called by CodeService before reading, updating or deleting a code, and
       by UserService before updating or deleting a user (a user owns itself).

Rules:
    CREATE, READ_ALL                → always allowed
    READ_ONE, UPDATE, DELETE        → allowed for the owner, or for an identity
                                      carrying the admin role
"""

from enum import Enum
from typing import Optional

from codevault.exceptions import ForbiddenError
from codevault.services.token_service import IdentityClaim


class Operation(str, Enum):
    CREATE = "create"
    READ_ALL = "read_all"
    READ_ONE = "read_one"
    UPDATE = "update"
    DELETE = "delete"


_UNRESTRICTED = frozenset({Operation.CREATE, Operation.READ_ALL})


def can_access(
    identity: IdentityClaim,
    resource_owner_id: Optional[str],
    operation: Operation,
) -> bool:
    """Return True when `identity` may perform `operation` on the resource."""
    if operation in _UNRESTRICTED:
        return True
    if identity.is_admin:
        return True
    return resource_owner_id is not None and identity.subject_id == str(resource_owner_id)


def ensure_access(
    identity: IdentityClaim,
    resource_owner_id: Optional[str],
    operation: Operation,
) -> None:
    """Raise ForbiddenError unless can_access() allows the operation."""
    if not can_access(identity, resource_owner_id, operation):
        raise ForbiddenError(
            context={
                "subject_id": identity.subject_id,
                "owner_id": resource_owner_id,
                "operation": operation.value,
            }
        )
