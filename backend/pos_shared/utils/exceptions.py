"""
Centralized HTTP exceptions for consistent error handling.

Each exception carries a stable `kind` that clients can branch on, plus a
human-readable `detail`. Constructing one logs it with its context.

Usage:
    from pos_shared.utils.exceptions import NotFoundError, ConflictError

    raise NotFoundError("Table", table_id)
    raise ConflictError("Table 5 is not occupied", table_id=table_id)
"""

from typing import Any

from fastapi import HTTPException, status

from pos_shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    kind: str = "error"

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, kind=self.kind, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("start_date is required")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    kind = "validation_error"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class PaymentAmountError(ValidationError):
    """Payment amount validation error."""

    def __init__(self, amount: int, reason: str, **log_context: Any):
        super().__init__(f"Invalid payment amount ({amount}): {reason}", amount=amount, **log_context)


# =============================================================================
# 401 Unauthorized Errors
# =============================================================================


class AuthenticationError(AppException):
    """Missing, invalid or expired credential (401)."""

    kind = "authentication_error"

    def __init__(self, detail: str = "Invalid credentials", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            headers={"WWW-Authenticate": "Bearer"},
            **log_context,
        )


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class AuthorizationError(AppException):
    """
    Authenticated but not allowed (403).

    Usage:
        raise AuthorizationError("create tables")
        raise AuthorizationError("modify admin accounts", user_id=user_id)
    """

    kind = "authorization_error"

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class InsufficientRoleError(AuthorizationError):
    """Caller's role does not reach the required role."""

    def __init__(self, action: str, required_role: str, **log_context: Any):
        super().__init__(
            f"{action} (requires role: {required_role})",
            required_role=required_role,
            **log_context,
        )


class MissingPermissionError(AuthorizationError):
    """Caller's role does not hold the required permission tag."""

    def __init__(self, action: str, permission: str, **log_context: Any):
        super().__init__(
            f"{action} (requires permission: {permission})",
            permission=permission,
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Order", order_id)
    """

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Precondition violated (409).

    Usage:
        raise ConflictError("Table 5 still has an active order", table_id=table_id)
    """

    kind = "conflict"

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class DuplicateEntityError(ConflictError):
    """Entity already exists."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"
        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


class AlreadyPaidError(ConflictError):
    """Order is settled and can no longer change."""

    def __init__(self, order_id: str, **log_context: Any):
        super().__init__(f"Order {order_id} is already paid", order_id=order_id, **log_context)


class TableNotOccupiedError(ConflictError):
    """Orders can only be opened on an occupied table."""

    def __init__(self, table_number: int, **log_context: Any):
        super().__init__(
            f"Table {table_number} is not occupied",
            table_number=table_number,
            **log_context,
        )


class InvalidTransitionError(ConflictError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition from '{from_status}' to '{to_status}' for {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to record payment", order_id=order_id)
    """

    kind = "internal_error"

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
