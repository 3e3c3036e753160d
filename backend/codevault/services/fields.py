"""
CodeVault Backend — Required Field Checks
==========================================

What:  Enforces the per-entity required-field lists from configuration.
Why:   Required fields are configuration (USER_REQUIRED_FIELDS,
       CODE_REQUIRED_FIELDS), so they cannot live in the pydantic schemas.
"""

from typing import Any, Dict, Iterable

from codevault.exceptions import ValidationError


def require_fields(fields: Dict[str, Any], required: Iterable[str]) -> None:
    """Raise ValidationError for the first required field that is absent or null."""
    for name in required:
        if fields.get(name) is None:
            raise ValidationError(message=f"Missing required field: {name}", field=name)


def reject_nulled_required(patch: Dict[str, Any], required: Iterable[str]) -> None:
    """A partial update may omit a required field but never set it to null."""
    for name in required:
        if name in patch and patch[name] is None:
            raise ValidationError(message=f"Field cannot be null: {name}", field=name)
