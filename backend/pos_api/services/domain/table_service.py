"""
Table Service - table lifecycle and the occupancy invariants.

Invariants kept after every successful write:
- occupied <=> waiter_id is set
- available => waiter, guest count and reservation fields are all empty
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos_api.models import Table, User
from pos_api.repositories import OrderRepository, TableFilters, TableRepository, UserRepository
from pos_api.services.base_service import BaseCRUDService
from pos_api.services.permissions import PermissionContext, policy
from pos_shared.config.constants import Limits, Permission, Role, TableStatus
from pos_shared.config.logging import get_logger
from pos_shared.infrastructure.locks import table_locks
from pos_shared.utils.exceptions import (
    ConflictError,
    DuplicateEntityError,
    NotFoundError,
    TableNotOccupiedError,
    ValidationError,
)
from pos_shared.utils.schemas import TableCreate, TableOutput

logger = get_logger(__name__)

OCCUPANCY_FIELDS = (
    "waiter_id",
    "guest_count",
    "reservation_name",
    "reservation_phone",
    "reservation_time",
)
STATE_FIELDS = ("status", *OCCUPANCY_FIELDS)
NON_NULLABLE_FIELDS = frozenset({"status", "capacity", "floor"})


def resolve_table_state(current: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """
    Merge a patch into the current table state and normalize the result.

    - available clears every occupancy field, whatever the patch says
    - any status other than occupied drops the assigned waiter
    - occupied without a waiter is rejected
    """
    state = {**current, **patch}
    status = TableStatus(state["status"])
    state["status"] = status

    if status is TableStatus.AVAILABLE:
        for field_name in OCCUPANCY_FIELDS:
            state[field_name] = None
    elif status is TableStatus.OCCUPIED:
        if not state.get("waiter_id"):
            raise ValidationError("Occupied table must have an assigned server", status=status.value)
    else:
        state["waiter_id"] = None

    return state


def snapshot_table_state(table: Table) -> dict[str, Any]:
    return {field_name: getattr(table, field_name) for field_name in STATE_FIELDS}


class TableService(BaseCRUDService[Table, TableOutput]):
    """Service for table management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            repo=TableRepository(db),
            output_schema=TableOutput,
            entity_name="Table",
        )
        self._tables = TableRepository(db)
        self._orders = OrderRepository(db)
        self._users = UserRepository(db)

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, ctx: PermissionContext, table_id: str) -> TableOutput:
        ctx.require_permission(Permission.TABLES, "view tables")
        return self.get_by_id(table_id)

    def list(
        self,
        ctx: PermissionContext,
        *,
        status: TableStatus | None = None,
        floor: int | None = None,
        waiter_id: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> list[TableOutput]:
        ctx.require_permission(Permission.TABLES, "view tables")
        return self.list_entities(
            TableFilters(status=status, floor=floor, waiter_id=waiter_id, limit=limit, offset=offset)
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, ctx: PermissionContext, data: TableCreate) -> TableOutput:
        ctx.require_create_table()

        if self._tables.find_by_number(data.number) is not None:
            raise DuplicateEntityError("Table", str(data.number))

        table = Table(
            number=data.number,
            capacity=data.capacity,
            floor=data.floor,
            status=TableStatus.AVAILABLE,
        )
        table.set_created_by(ctx.user_id)
        try:
            self._tables.add(table)
            self._commit()
        except IntegrityError:
            self.db.rollback()
            # Lost a race with a concurrent create of the same number
            raise DuplicateEntityError("Table", str(data.number))

        logger.info("Table created", table_id=table.id, number=table.number, user_id=ctx.user_id)
        return self.to_output(table)

    def update_status(self, ctx: PermissionContext, table_id: str, patch: dict[str, Any]) -> TableOutput:
        """
        Apply a partial update. Keys present in `patch` are written (None
        clears), absent keys are left alone; the result is normalized by
        resolve_table_state().
        """
        ctx.require_permission(Permission.TABLES, "update tables")

        for field_name in NON_NULLABLE_FIELDS & patch.keys():
            if patch[field_name] is None:
                raise ValidationError(f"{field_name} cannot be null", field=field_name)

        with table_locks.hold(table_id):
            table = self._tables.find_by_id_for_update(table_id)
            if table is None:
                raise NotFoundError("Table", table_id)

            current = snapshot_table_state(table)
            state = resolve_table_state(current, {k: v for k, v in patch.items() if k in STATE_FIELDS})

            leaving_occupied = (
                current["status"] is TableStatus.OCCUPIED and state["status"] is not TableStatus.OCCUPIED
            )
            if leaving_occupied and self._orders.find_active_for_table(table.id) is not None:
                raise ConflictError(
                    f"Table {table.number} still has an active order",
                    table_id=table.id,
                    requested_status=state["status"].value,
                )

            if state["waiter_id"] and state["waiter_id"] != current["waiter_id"]:
                # Seating names the first server; replacing one is assign_waiter's gate
                if current["status"] is TableStatus.OCCUPIED:
                    ctx.require_assign_waiter()
                self._require_assignable_waiter(state["waiter_id"])

            other = {k: v for k, v in patch.items() if k not in STATE_FIELDS}
            old_values = self._apply_changes(table, {**state, **other})
            table.set_updated_by(ctx.user_id)
            self._commit()

        if "status" in old_values:
            logger.info(
                "Table status changed",
                table_id=table.id,
                number=table.number,
                from_status=old_values["status"].value,
                to_status=table.status.value,
                waiter_id=table.waiter_id,
                user_id=ctx.user_id,
            )
        else:
            logger.info("Table updated", table_id=table.id, fields=sorted(old_values), user_id=ctx.user_id)
        return self.to_output(table)

    def assign_waiter(self, ctx: PermissionContext, table_id: str, waiter_id: str) -> TableOutput:
        """
        Hand an occupied table to another server. Status is not changed, so
        only occupied tables (the ones that carry a server) can be assigned.
        """
        ctx.require_assign_waiter()

        with table_locks.hold(table_id):
            table = self._tables.find_by_id_for_update(table_id)
            if table is None:
                raise NotFoundError("Table", table_id)
            if table.status is not TableStatus.OCCUPIED:
                raise TableNotOccupiedError(table.number, table_id=table.id)

            self._require_assignable_waiter(waiter_id)
            previous = table.waiter_id
            table.waiter_id = waiter_id
            table.set_updated_by(ctx.user_id)
            self._commit()

        logger.info(
            "Waiter assigned",
            table_id=table.id,
            number=table.number,
            from_waiter_id=previous,
            waiter_id=waiter_id,
            user_id=ctx.user_id,
        )
        return self.to_output(table)

    # =========================================================================
    # Internal
    # =========================================================================

    def release(self, table: Table, user_id: str | None) -> None:
        """
        Return a table to available and clear its occupancy fields.
        Caller holds the table lock and commits.
        """
        state = resolve_table_state(snapshot_table_state(table), {"status": TableStatus.AVAILABLE})
        self._apply_changes(table, state)
        table.set_updated_by(user_id)

    def _require_assignable_waiter(self, waiter_id: str) -> User:
        waiter = self._users.find_by_id(waiter_id)
        if waiter is None or not waiter.is_active:
            raise NotFoundError("Waiter", waiter_id)
        if waiter.role is not Role.WAITER and not policy.is_at_least(waiter.role, Role.MANAGER):
            raise ValidationError(
                f"A {waiter.role.value} cannot be assigned to a table",
                waiter_id=waiter_id,
            )
        return waiter

