"""Domain models for the account service."""

from .auth_context import AuthContext
from .user import User, UserRole, UserStatus

__all__ = [
    "AuthContext",
    "User",
    "UserRole",
    "UserStatus",
]
