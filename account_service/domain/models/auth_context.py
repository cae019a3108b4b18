from __future__ import annotations

from dataclasses import dataclass

from .user import UserRole


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Identity claims carried by a session token and passed into authenticated operations."""

    subject_id: str
    email: str
    role: UserRole
