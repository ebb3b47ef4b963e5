"""
Users module - Staff accounts and roles.
"""

from school_admin.modules.users.models import User, UserRole
from school_admin.modules.users.repository import UserRepository

__all__ = ["User", "UserRole", "UserRepository"]
