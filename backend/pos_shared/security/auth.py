"""
Credential verifier: JWT issue/verify and the request identity dependency.

Tokens carry the staff member's id (sub), email and role. Everything that
needs the caller's identity gets it from current_user_context().
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Header

from pos_shared.config.constants import Role
from pos_shared.config.logging import get_logger
from pos_shared.config.settings import settings
from pos_shared.security.password import hash_password, needs_rehash, verify_password
from pos_shared.utils.exceptions import AuthenticationError

logger = get_logger(__name__)

JWT_ALGORITHM = "HS256"


# =============================================================================
# JWT Functions
# =============================================================================


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
    token_type: str = "access",
) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Claims to include in the token (sub, email, role).
        ttl_seconds: Token lifetime in seconds. Defaults to access token expiry.
        token_type: Type of token.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": token_type,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Returns:
        Decoded token claims.

    Raises:
        AuthenticationError: If the token is invalid, expired or lacks claims.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        # Generic message to the client, actual reason in the log
        raise AuthenticationError("Invalid token", error=str(e))

    if not payload.get("sub"):
        raise AuthenticationError("Invalid token: missing subject claim")

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token: invalid type claim")

    try:
        Role(payload.get("role"))
    except ValueError:
        raise AuthenticationError("Invalid token: unknown role claim")

    return payload


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        AuthenticationError: If header is missing or malformed.
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Invalid Authorization header format. Expected: Bearer <token>")
    return authorization.split(" ", 1)[1].strip()


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the current user claims from the JWT.

    Usage:
        @router.get("/protected")
        def protected_endpoint(user = Depends(current_user_context)):
            user_id = user["sub"]
            role = user["role"]

    Returns:
        Dict with: sub (user id), email, role
    """
    token = get_bearer_token(authorization)
    return verify_jwt(token)


# =============================================================================
# Credential verifier seam
# =============================================================================


class CredentialVerifier:
    """
    The one object the auth and staff services use to handle credentials.

    Services take it as a constructor argument, so tests can pass a verifier
    with a cheaper hash function.
    """

    def issue(self, user_id: str, email: str, role: Role) -> str:
        return sign_jwt({"sub": user_id, "email": email, "role": role.value})

    def verify(self, token: str) -> dict[str, Any]:
        return verify_jwt(token)

    def hash(self, plaintext: str) -> str:
        return hash_password(plaintext)

    def compare(self, plaintext: str, digest: str) -> bool:
        return verify_password(plaintext, digest)

    def needs_rehash(self, digest: str) -> bool:
        return needs_rehash(digest)

    @property
    def token_ttl_seconds(self) -> int:
        return settings.jwt_access_token_expire_minutes * 60


default_verifier = CredentialVerifier()
