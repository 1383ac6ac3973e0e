"""
Staff Service - staff accounts and the provisioning hierarchy.

Who may provision whom:
- admin: any role
- owner: manager, waiter, host, chef
- manager: waiter, host, chef
Admin accounts are visible and modifiable only by admins.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos_api.models import User
from pos_api.repositories import UserFilters, UserRepository
from pos_api.services.base_service import BaseCRUDService
from pos_api.services.permissions import PermissionContext
from pos_shared.config.constants import Limits, Role
from pos_shared.config.logging import get_logger, mask_email
from pos_shared.security.auth import CredentialVerifier, default_verifier
from pos_shared.utils.exceptions import DuplicateEntityError
from pos_shared.utils.schemas import StaffCreate, StaffOutput, StaffUpdate

logger = get_logger(__name__)


class StaffService(BaseCRUDService[User, StaffOutput]):
    """Service for staff management. Passwords never leave this service."""

    def __init__(self, db: Session, verifier: CredentialVerifier = default_verifier):
        super().__init__(
            db=db,
            repo=UserRepository(db),
            output_schema=StaffOutput,
            entity_name="Staff member",
        )
        self._users = UserRepository(db)
        self._verifier = verifier

    # =========================================================================
    # Reads
    # =========================================================================

    def list(
        self,
        ctx: PermissionContext,
        role: Role | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[StaffOutput]:
        """
        Without a filter admins are left out. Filtering by waiter is open to
        every authenticated caller so hosts can pick a server for a table.
        """
        ctx.require_staff_listing(role)

        if role is None:
            return self.list_entities(UserFilters(exclude_role=Role.ADMIN, limit=limit, offset=offset))

        ctx.require_staff_record_access(role)
        return self.list_entities(UserFilters(role=role, limit=limit, offset=offset))

    def get(self, ctx: PermissionContext, user_id: str) -> StaffOutput:
        ctx.require_staff_listing(None)
        user = self.get_entity(user_id)
        ctx.require_staff_record_access(user.role)
        return self.to_output(user)

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, ctx: PermissionContext, data: StaffCreate) -> StaffOutput:
        ctx.require_staff_management(data.role, "create staff")
        user = self.create_account(data.name, data.email, data.password, data.role, created_by=ctx.user_id)

        logger.info(
            "Staff member created",
            staff_id=user.id,
            email=mask_email(user.email),
            role=user.role.value,
            user_id=ctx.user_id,
        )
        return self.to_output(user)

    def update(self, ctx: PermissionContext, user_id: str, data: StaffUpdate) -> StaffOutput:
        user = self.get_entity(user_id)
        ctx.require_staff_management(user.role, "update staff")

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        if "role" in changes and changes["role"] is not user.role:
            ctx.require_staff_management(changes["role"], "assign role")

        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            existing = self._users.find_by_email(changes["email"])
            if existing is not None and existing.id != user.id:
                raise DuplicateEntityError("Staff email", changes["email"])

        if "password" in changes:
            changes["password"] = self._verifier.hash(changes["password"])

        active = changes.pop("is_active", None)
        old_values = self._apply_changes(user, changes)
        if active is False and user.is_active:
            user.soft_delete(ctx.user_id)
            old_values["is_active"] = True
        elif active is True and not user.is_active:
            user.restore(ctx.user_id)
            old_values["is_active"] = False

        if old_values:
            user.set_updated_by(ctx.user_id)
            try:
                self._commit()
            except IntegrityError:
                self.db.rollback()
                raise DuplicateEntityError("Staff email", changes.get("email", user_id))
            logger.info(
                "Staff member updated",
                staff_id=user.id,
                fields=sorted(old_values),
                user_id=ctx.user_id,
            )
        return self.to_output(user)

    def deactivate(self, ctx: PermissionContext, user_id: str) -> StaffOutput:
        """Soft delete: the account is disabled, the row stays."""
        user = self.get_entity(user_id)
        ctx.require_staff_management(user.role, "deactivate staff")

        if user.is_active:
            user.soft_delete(ctx.user_id)
            self._commit()
            logger.info("Staff member deactivated", staff_id=user.id, role=user.role.value, user_id=ctx.user_id)
        return self.to_output(user)

    # =========================================================================
    # Shared with registration
    # =========================================================================

    def create_account(
        self,
        name: str,
        email: str,
        password: str,
        role: Role,
        created_by: str | None = None,
    ) -> User:
        """Insert an account with a hashed password. Callers do the role checks."""
        email = email.strip().lower()
        if self._users.find_by_email(email) is not None:
            raise DuplicateEntityError("Staff email", email)

        user = User(
            name=name.strip(),
            email=email,
            password=self._verifier.hash(password),
            role=role,
        )
        user.set_created_by(created_by)
        try:
            self._users.add(user)
            self._commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateEntityError("Staff email", email)
        return user
