"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time; point them at the test setup first
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-with-at-least-thirty-two-chars")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pos_api.main import app
from pos_api.models import Base, MenuItem, Table, User
from pos_api.services.permissions import Identity, PermissionContext
from pos_shared.config.constants import MenuCategory, Role, TableStatus
from pos_shared.infrastructure.db import get_db
from pos_shared.security import password as password_module
from pos_shared.security.auth import default_verifier
from pos_shared.security.password import hash_password


DEFAULT_PASSWORD = "secret123"

# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture(autouse=True, scope="session")
def fast_bcrypt():
    """Minimum bcrypt cost; login does not rehash because rounds match."""
    original = password_module.BCRYPT_ROUNDS
    password_module.BCRYPT_ROUNDS = 4
    yield
    password_module.BCRYPT_ROUNDS = original


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Test client sharing the test session. The app lifespan is not run, the
    schema comes from db_session.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Builders
# =============================================================================


def make_user(db_session, role: Role, email: str | None = None, name: str | None = None,
              password: str = DEFAULT_PASSWORD, is_active: bool = True) -> User:
    user = User(
        name=name or f"Test {role.value.title()}",
        email=email or f"{role.value}@test.com",
        password=hash_password(password),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    return user


def make_table(db_session, number: int, capacity: int = 4, floor: int = 1,
               status: TableStatus = TableStatus.AVAILABLE, waiter: User | None = None) -> Table:
    table = Table(
        number=number,
        capacity=capacity,
        floor=floor,
        status=status,
        waiter_id=waiter.id if waiter else None,
    )
    db_session.add(table)
    db_session.commit()
    return table


def make_menu_item(db_session, name: str, price_cents: int,
                   category: MenuCategory = MenuCategory.MAIN_COURSE, available: bool = True) -> MenuItem:
    item = MenuItem(name=name, price_cents=price_cents, category=category, available=available)
    db_session.add(item)
    db_session.commit()
    return item


def context_for(user: User) -> PermissionContext:
    return PermissionContext(Identity(id=user.id, email=user.email, role=user.role))


def headers_for(user: User) -> dict[str, str]:
    token = default_verifier.issue(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Seed fixtures
# =============================================================================


@pytest.fixture
def staff(db_session) -> dict[Role, User]:
    """One active account per role, email <role>@test.com."""
    return {role: make_user(db_session, role) for role in Role}


@pytest.fixture
def contexts(staff) -> dict[Role, PermissionContext]:
    return {role: context_for(user) for role, user in staff.items()}


@pytest.fixture
def headers(staff) -> dict[Role, dict[str, str]]:
    return {role: headers_for(user) for role, user in staff.items()}


@pytest.fixture
def menu(db_session) -> dict[str, MenuItem]:
    return {
        "burger": make_menu_item(db_session, "Burger", 1250),
        "fries": make_menu_item(db_session, "Fries", 450, category=MenuCategory.SIDE),
        "soda": make_menu_item(db_session, "Soda", 300, category=MenuCategory.DRINK),
    }


@pytest.fixture
def table(db_session) -> Table:
    """Table #5, available."""
    return make_table(db_session, number=5)


@pytest.fixture
def occupied_table(db_session, staff) -> Table:
    """Table #7, occupied and served by the waiter."""
    return make_table(db_session, number=7, status=TableStatus.OCCUPIED, waiter=staff[Role.WAITER])
