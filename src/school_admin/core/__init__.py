"""
Core module - Configuration, database, security, errors and utilities.
"""

from school_admin.core.config import get_settings, settings
from school_admin.core.database import Base, close_db, get_db, init_db
from school_admin.core.errors import (
    BusinessRuleError,
    ConflictError,
    DeleteFailedError,
    DependencyError,
    NotFoundError,
    ServiceError,
)
from school_admin.core.redis import close_redis, init_redis, redis_status
from school_admin.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Errors
    "ServiceError",
    "NotFoundError",
    "ConflictError",
    "DependencyError",
    "BusinessRuleError",
    "DeleteFailedError",
    # Redis
    "init_redis",
    "close_redis",
    "redis_status",
    # Security
    "hash_password",
    "verify_password",
    "create_access_token",
    "create_refresh_token",
    "decode_token",
]
