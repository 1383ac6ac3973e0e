"""
Authentication router.
Handles login, admin registration and the caller's profile.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from pos_api.routers._common import get_permission_context
from pos_api.services.domain import AuthService
from pos_api.services.permissions import PermissionContext
from pos_shared.infrastructure.db import get_db
from pos_shared.security.rate_limit import LOGIN_RATE_LIMIT, limiter
from pos_shared.utils.schemas import LoginRequest, LoginResponse, RegisterRequest, StaffOutput, UserInfo

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """
    Authenticate a staff member and return an access token.

    The token carries sub (user id), email and role. role_hint narrows
    which accounts may sign in: "admin", "staff" or a specific role.
    """
    return AuthService(db).login(body.email, body.password, body.role_hint)


@router.post("/register", response_model=UserInfo, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> UserInfo:
    """Create an account with any role. Admin only."""
    return AuthService(db).register(ctx, body)


@router.get("/profile", response_model=StaffOutput)
def profile(
    db: Session = Depends(get_db),
    ctx: PermissionContext = Depends(get_permission_context),
) -> StaffOutput:
    return AuthService(db).profile(ctx)
