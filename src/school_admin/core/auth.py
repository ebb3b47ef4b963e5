"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
Validates JWT bearer tokens and enforces role-based access control
using the security utilities defined in security.py.

SECURITY NOTE:
- Development mode auth bypass is ONLY enabled when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable test tokens
"""

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from school_admin.core.config import settings
from school_admin.core.security import decode_token
from school_admin.modules.users.models import UserRole

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token for authentication",
)


@dataclass
class CurrentUser:
    """
    Represents an authenticated staff user, populated from JWT claims.

    Attributes:
        id: User's integer identifier
        email: User's email address
        role: User's role (admin, secretary, teacher, finance_officer)
        name: User's display name (optional)
    """

    id: int
    email: str
    role: str
    name: str | None = None

    def has_role(self, *roles: UserRole | str) -> bool:
        allowed = {r.value if isinstance(r, UserRole) else r for r in roles}
        return self.role in allowed

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, email={self.email}, role={self.role})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development mode is safe to enable.

    Both the loaded settings and the raw PYTHON_ENV variable must agree
    that this is a development environment.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


_DEVELOPMENT_MODE = _is_dev_mode_safe()

_DEV_ADMIN = CurrentUser(
    id=1,
    email="admin@school.dev",
    role=UserRole.ADMIN.value,
    name="Development Admin",
)


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _validate_jwt_token(token: str) -> CurrentUser:
    """
    Validate JWT token and extract user claims.

    Raises:
        HTTPException 401: If token is invalid, expired, of the wrong type,
            or missing required claims
    """
    if _DEVELOPMENT_MODE and token in ("dev-token", "test-token"):
        logger.debug("Development mode: Using test token")
        return _DEV_ADMIN

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    token_type = payload.get("type", "access")
    if token_type != "access":
        logger.warning(f"Invalid token type: {token_type}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        subject = payload.get("sub")
        if not subject:
            raise ValueError("Missing 'sub' claim in token")

        return CurrentUser(
            id=int(subject),
            email=payload.get("email", ""),
            role=payload.get("role", ""),
            name=payload.get("name"),
        )
    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """
    FastAPI dependency that validates the bearer token and returns the user.

    Usage:
        @router.get("/endpoint")
        async def endpoint(user: CurrentUser = Depends(get_current_user)):
            ...
    """
    user = await _validate_jwt_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id} ({user.email})")
    return user


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[CurrentUser]]:
    """
    Build a dependency that only admits users holding one of ``roles``.

    Usage:
        @router.delete("/{id}")
        async def delete(user: CurrentUser = Depends(require_roles(UserRole.ADMIN))):
            ...

    Raises:
        HTTPException 403: If the authenticated user lacks every listed role
    """

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.has_role(*roles):
            required = ", ".join(r.value for r in roles)
            logger.warning(
                f"Access denied: User {user.id} ({user.email}) has role '{user.role}', "
                f"but one of [{required}] is required"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "INSUFFICIENT_ROLE",
                    "message": f"This action requires one of the roles: {required}.",
                },
            )
        return user

    return dependency


# Common role gates
require_staff = require_roles(UserRole.ADMIN, UserRole.SECRETARY)
require_admin = require_roles(UserRole.ADMIN)
require_finance = require_roles(UserRole.ADMIN, UserRole.FINANCE_OFFICER)


__all__ = [
    "CurrentUser",
    "get_current_user",
    "require_roles",
    "require_staff",
    "require_admin",
    "require_finance",
]
