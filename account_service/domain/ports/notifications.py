from __future__ import annotations

from typing import Protocol

from ..models import User


class Notifier(Protocol):
    """Outbound delivery of account emails. Failures raise ``NotificationError``."""

    def send_verification_email(self, user: User, token: str) -> None:
        ...

    def send_password_reset_email(self, user: User, token: str) -> None:
        ...
