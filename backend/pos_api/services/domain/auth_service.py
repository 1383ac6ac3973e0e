"""
Auth Service - login, registration and the caller's own profile.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from pos_api.repositories import UserRepository
from pos_api.services.base_service import BaseService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import Role
from pos_shared.config.logging import audit_auth_event, get_logger, mask_email
from pos_shared.security.auth import CredentialVerifier, default_verifier
from pos_shared.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from pos_shared.utils.schemas import LoginResponse, RegisterRequest, StaffOutput, UserInfo

from .staff_service import StaffService

logger = get_logger(__name__)

STAFF_HINT = "staff"


class AuthService(BaseService):
    """Credential checks go through the injected CredentialVerifier only."""

    def __init__(self, db: Session, verifier: CredentialVerifier = default_verifier):
        super().__init__(db)
        self._users = UserRepository(db)
        self._verifier = verifier

    def login(self, email: str, password: str, role_hint: str | None = None) -> LoginResponse:
        """
        Authenticate and issue an access token.

        role_hint restricts which accounts may sign in through this call:
        "admin" admits admins only, "staff" admits everyone except admins,
        any other role name must match the account's role exactly.
        """
        hint = self._parse_role_hint(role_hint)

        user = self._users.find_by_email(email)
        if user is None or not self._verifier.compare(password, user.password):
            audit_auth_event("LOGIN", email=email, success=False, reason="invalid_credentials")
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            audit_auth_event("LOGIN", user_id=user.id, email=email, success=False, reason="inactive")
            raise AuthenticationError("Account is inactive")

        if not self._hint_matches(hint, user.role):
            audit_auth_event(
                "LOGIN",
                user_id=user.id,
                email=email,
                success=False,
                reason="role_hint_mismatch",
                role_hint=role_hint,
            )
            raise AuthorizationError(f"sign in as {role_hint}", user_id=user.id, role=user.role.value)

        if self._verifier.needs_rehash(user.password):
            user.password = self._verifier.hash(password)
            self._commit()
            logger.info("Password hash upgraded", user_id=user.id)

        token = self._verifier.issue(user.id, user.email, user.role)
        audit_auth_event("LOGIN", user_id=user.id, email=email, success=True, role=user.role.value)

        return LoginResponse(
            access_token=token,
            expires_in=self._verifier.token_ttl_seconds,
            user=UserInfo.model_validate(user),
        )

    def register(self, ctx: PermissionContext, data: RegisterRequest) -> UserInfo:
        """Create an account with any role. Admin only."""
        ctx.require_register()

        staff = StaffService(self.db, verifier=self._verifier)
        user = staff.create_account(data.name, data.email, data.password, data.role, created_by=ctx.user_id)

        audit_auth_event("REGISTER", user_id=user.id, email=user.email, success=True, role=user.role.value)
        logger.info(
            "User registered",
            new_user_id=user.id,
            email=mask_email(user.email),
            role=user.role.value,
            user_id=ctx.user_id,
        )
        return UserInfo.model_validate(user)

    def profile(self, ctx: PermissionContext) -> StaffOutput:
        user = self._users.find_by_id(ctx.user_id)
        if user is None:
            raise NotFoundError("User", ctx.user_id)
        if not user.is_active:
            raise AuthenticationError("Account is inactive")
        return StaffOutput.model_validate(user)

    # =========================================================================
    # Role hints
    # =========================================================================

    @staticmethod
    def _parse_role_hint(role_hint: str | None) -> Role | str | None:
        if not role_hint:
            return None
        value = role_hint.strip().lower()
        if value == STAFF_HINT:
            return STAFF_HINT
        try:
            return Role(value)
        except ValueError:
            raise ValidationError(f"Unknown role hint '{role_hint}'", role_hint=role_hint)

    @staticmethod
    def _hint_matches(hint: Role | str | None, role: Role) -> bool:
        if hint is None:
            return True
        if hint == STAFF_HINT:
            return role is not Role.ADMIN
        return role is hint
