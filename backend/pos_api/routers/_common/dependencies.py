"""
Request-scoped dependencies: who is calling.
"""

from typing import Any

from fastapi import Depends
from sqlalchemy.orm import Session

from pos_api.repositories import UserRepository
from pos_api.services.permissions import Identity, PermissionContext
from pos_shared.infrastructure.db import get_db
from pos_shared.security.auth import current_user_context
from pos_shared.utils.exceptions import AuthenticationError


def get_permission_context(
    claims: dict[str, Any] = Depends(current_user_context),
    db: Session = Depends(get_db),
) -> PermissionContext:
    """
    Build the caller's PermissionContext from the verified bearer token.

    Tokens outlive deactivation, so the account is checked on every request.

    Usage:
        @router.get("/tables")
        def list_tables(ctx: PermissionContext = Depends(get_permission_context)):
            ...
    """
    identity = Identity.from_claims(claims)
    user = UserRepository(db).find_by_id(identity.id)
    if user is None or not user.is_active:
        raise AuthenticationError("Account is inactive", user_id=identity.id)
    return PermissionContext(identity)
