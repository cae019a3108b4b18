from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Protocol

from ..models import User, UserRole, UserStatus


class UserRepository(Protocol):
    """Abstract storage for user accounts, keyed by id and by unique email."""

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def find_by_verification_token(self, token: str, now: datetime) -> Optional[User]:
        """Return the account holding ``token`` only while ``now`` is before its expiry."""
        ...

    def find_by_reset_token(self, token: str, now: datetime) -> Optional[User]:
        """Return the account holding ``token`` only while ``now`` is before its expiry."""
        ...

    def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        profile_image_url: Optional[str] = None,
        role: UserRole = UserRole.CLIENT,
        status: UserStatus = UserStatus.ACTIVE,
        is_email_verified: bool = False,
        email_verification_token: Optional[str] = None,
        email_verification_expires: Optional[datetime] = None,
    ) -> User:
        """Insert a new account; raises ``DuplicateError`` when the email is taken."""
        ...

    def update(
        self,
        user_id: str,
        changes: Dict[str, Any],
        *,
        expected: Optional[Dict[str, Any]] = None,
    ) -> Optional[User]:
        """
        Apply ``changes`` to one account in a single transaction.

        When ``expected`` is given the write only happens if the stored columns
        still hold those values. Returns ``None`` when nothing was written.
        """
        ...

    def close(self) -> None:
        ...
