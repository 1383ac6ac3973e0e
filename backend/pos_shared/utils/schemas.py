"""
Pydantic request/response schemas shared by the routers and services.

Money is always integer cents. Enum fields accept and emit the lowercase
wire values ("occupied", "in_progress", "credit_card", ...).
"""

from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field

from pos_shared.config.constants import (
    Limits,
    MenuCategory,
    OrderItemStatus,
    OrderStatus,
    PaymentMethod,
    Role,
    TableStatus,
)


# =============================================================================
# Authentication Schemas
# =============================================================================


class LoginRequest(BaseModel):
    """Login request body. role_hint is a role name or "staff"."""

    email: EmailStr
    password: str
    role_hint: str | None = None


class UserInfo(BaseModel):
    """Basic user information included in auth responses."""

    id: str
    name: str
    email: str
    role: Role

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    """Login response with JWT token."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds
    user: UserInfo


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH)
    role: Role


# =============================================================================
# Staff Schemas
# =============================================================================


class StaffOutput(BaseModel):
    """Staff record as seen by clients. Never includes the password hash."""

    id: str
    name: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class StaffCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr
    password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH)
    role: Role


class StaffUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=Limits.MIN_PASSWORD_LENGTH)
    role: Role | None = None
    is_active: bool | None = None


# =============================================================================
# Table Schemas
# =============================================================================


class TableOutput(BaseModel):
    id: str
    number: int
    capacity: int
    floor: int
    status: TableStatus
    waiter_id: str | None = None
    guest_count: int | None = None
    reservation_name: str | None = None
    reservation_phone: str | None = None
    reservation_time: datetime | None = None

    class Config:
        from_attributes = True


class TableCreate(BaseModel):
    number: int = Field(ge=1)
    capacity: int = Field(ge=1, le=Limits.MAX_TABLE_CAPACITY)
    floor: int = Limits.DEFAULT_FLOOR


class TableUpdate(BaseModel):
    """
    Partial table update. Fields left out are untouched; fields sent as null
    are cleared.
    """

    status: TableStatus | None = None
    waiter_id: str | None = None
    guest_count: int | None = Field(default=None, ge=0, le=Limits.MAX_GUEST_COUNT)
    capacity: int | None = Field(default=None, ge=1, le=Limits.MAX_TABLE_CAPACITY)
    floor: int | None = None
    reservation_name: str | None = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    reservation_phone: str | None = Field(default=None, max_length=50)
    reservation_time: datetime | None = None


class AssignWaiterRequest(BaseModel):
    waiter_id: str


# =============================================================================
# Menu Schemas
# =============================================================================


class MenuItemOutput(BaseModel):
    id: str
    name: str
    description: str | None = None
    price_cents: int
    category: MenuCategory
    available: bool
    is_special: bool

    class Config:
        from_attributes = True


class MenuItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price_cents: int = Field(ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    category: MenuCategory
    available: bool = True
    is_special: bool = False


class MenuItemUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price_cents: int | None = Field(default=None, ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    category: MenuCategory | None = None
    available: bool | None = None
    is_special: bool | None = None


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    """An item to append to an order. price_cents overrides the menu price."""

    menu_item_id: str
    quantity: int = Field(default=1, ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    price_cents: int | None = Field(default=None, ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)


class OrderItemUpdate(BaseModel):
    quantity: int | None = Field(default=None, ge=Limits.MIN_QUANTITY, le=Limits.MAX_QUANTITY)
    notes: str | None = Field(default=None, max_length=Limits.MAX_NOTES_LENGTH)
    status: OrderItemStatus | None = None
    price_cents: int | None = Field(default=None, ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)


class OrderItemOutput(BaseModel):
    id: str
    menu_item_id: str
    name: str
    price_cents: int
    quantity: int
    notes: str | None = None
    status: OrderItemStatus

    class Config:
        from_attributes = True


class OrderCreate(BaseModel):
    table_id: str
    waiter_id: str | None = None
    items: list[OrderItemInput] = Field(default_factory=list)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderOutput(BaseModel):
    id: str
    table_id: str
    waiter_id: str | None = None
    status: OrderStatus
    items: list[OrderItemOutput]
    total_cents: int
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Payment Schemas
# =============================================================================


class PaymentCreate(BaseModel):
    order_id: str
    amount_cents: int
    tip_cents: int = 0
    payment_method: PaymentMethod


class PaymentOutput(BaseModel):
    id: str
    order_id: str
    amount_cents: int
    tip_cents: int
    payment_method: PaymentMethod
    payment_date: datetime
    recorded_by_id: str | None = None

    class Config:
        from_attributes = True


# =============================================================================
# Report Schemas
# =============================================================================


class ItemFrequencyEntry(BaseModel):
    menu_item_id: str
    name: str
    count: int  # order lines
    quantity: int  # units sold


class ItemFrequencyReport(BaseModel):
    start_date: date
    end_date: date
    items: list[ItemFrequencyEntry]


class RevenueReport(BaseModel):
    start_date: date
    end_date: date
    total_revenue_cents: int
    revenue_by_method: dict[str, int]
    total_tips_cents: int
    daily_revenue: dict[str, int]


class OrderStatisticsReport(BaseModel):
    start_date: date
    end_date: date
    total_orders: int
    orders_by_status: dict[str, int]
    average_order_amount_cents: int
    orders_by_day_of_week: dict[str, int]


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    status: str
    database: str
    environment: str
