"""Error taxonomy shared by every account flow."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from fastapi import status


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    code: str
    message: str


class AccountError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None, *, status_code: Optional[int] = None) -> None:
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AccountError):
    """Malformed input; carries field-level errors and never changes state."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, errors: List[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__(self.errors[0].message if self.errors else None)


class DuplicateError(AccountError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "User already exists with this email"


class CredentialError(AccountError):
    """Wrong email or password. The message never says which one."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class IncorrectPasswordError(CredentialError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = (
        "Current password is incorrect. If you forgot your password, "
        "use the forgot password link to reset it."
    )


class AccountStateError(AccountError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account is suspended or inactive"


class AccountNotFoundError(AccountError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class TokenErrorKind(str, Enum):
    INVALID = "invalid"
    EXPIRED = "expired"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"


class TokenError(AccountError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid or expired token"

    def __init__(
        self,
        kind: TokenErrorKind = TokenErrorKind.INVALID,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
    ) -> None:
        self.kind = kind
        super().__init__(message, status_code=status_code)


class UploadError(AccountError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Error uploading profile image"


class NotificationError(AccountError):
    default_message = "Error sending email"


class ServerError(AccountError):
    default_message = "Server error"
