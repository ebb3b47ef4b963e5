"""Authentication module."""

from school_admin.modules.auth.router import router
from school_admin.modules.auth.schemas import LoginRequest, LoginResponse, TokenResponse

__all__ = ["router", "LoginRequest", "LoginResponse", "TokenResponse"]
