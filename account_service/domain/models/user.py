"""User domain model for account authentication and management."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    CLIENT = "CLIENT"
    GUIDE = "GUIDE"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    INACTIVE = "INACTIVE"


@dataclass(slots=True)
class User:
    """
    User entity shared by clients, guides and administrators.

    Attributes:
        id: Opaque unique identifier
        email: Login key, unique and matched exactly as stored
        password_hash: bcrypt digest of the account password
        first_name: Given name
        last_name: Family name
        role: CLIENT, GUIDE or ADMIN, fixed at creation
        status: Only ACTIVE accounts may authenticate
        is_email_verified: Whether the verification link was followed
        email_verification_token: Outstanding single-use verification token
        email_verification_expires: Expiry of the verification token
        password_reset_token: Outstanding single-use reset token
        password_reset_expires: Expiry of the reset token
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    created_at: datetime
    updated_at: datetime
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    profile_image_url: Optional[str] = None
    role: UserRole = UserRole.CLIENT
    status: UserStatus = UserStatus.ACTIVE
    is_email_verified: bool = False
    email_verification_token: Optional[str] = None
    email_verification_expires: Optional[datetime] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def is_active(self) -> bool:
        """Check if the account may authenticate."""
        return self.status == UserStatus.ACTIVE

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role.value} status={self.status.value}>"
