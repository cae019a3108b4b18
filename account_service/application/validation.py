"""Pure validation of account requests into field-level errors."""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from typing import List, Optional

from email_validator import EmailNotValidError, validate_email

from ..domain.errors import FieldError
from ..domain.models import UserRole
from .requests import (
    ForgotPasswordRequest,
    ImageUpload,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_BYTES = 72
MAX_IMAGE_BYTES = 5 * 1024 * 1024
SELF_ASSIGNABLE_ROLES = (UserRole.CLIENT.value, UserRole.GUIDE.value)

_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])")
_PHONE_PATTERN = re.compile(r"^[+]?[1-9]?[0-9]{7,15}$")


def parse_date(value: str) -> date:
    """Parse an ISO date, or the date part of an ISO datetime."""
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()


def validate_register(request: RegisterRequest) -> List[FieldError]:
    errors: List[FieldError] = []
    _check_name(errors, "firstName", "First name", request.first_name, required=True)
    _check_name(errors, "lastName", "Last name", request.last_name, required=True)
    _check_email(errors, request.email)
    _check_new_password(errors, "password", request.password)
    _check_phone(errors, request.phone)
    _check_date_of_birth(errors, request.date_of_birth)
    if request.role is not None and request.role not in SELF_ASSIGNABLE_ROLES:
        errors.append(FieldError("role", "invalid", "Role must be either CLIENT or GUIDE"))
    _check_image(errors, request.image)
    return errors


def validate_login(request: LoginRequest) -> List[FieldError]:
    errors: List[FieldError] = []
    _check_email(errors, request.email)
    if not request.password:
        errors.append(FieldError("password", "required", "Password is required"))
    return errors


def validate_forgot_password(request: ForgotPasswordRequest) -> List[FieldError]:
    errors: List[FieldError] = []
    _check_email(errors, request.email)
    return errors


def validate_reset_password(request: ResetPasswordRequest) -> List[FieldError]:
    errors: List[FieldError] = []
    if not request.token:
        errors.append(FieldError("token", "required", "Reset token is required"))
    _check_new_password(errors, "password", request.password)
    return errors


def validate_update_profile(request: UpdateProfileRequest) -> List[FieldError]:
    errors: List[FieldError] = []
    _check_name(errors, "firstName", "First name", request.first_name, required=False)
    _check_name(errors, "lastName", "Last name", request.last_name, required=False)
    _check_phone(errors, request.phone)
    _check_date_of_birth(errors, request.date_of_birth)
    _check_image(errors, request.image)
    return errors


def validate_new_password(request: UpdatePasswordRequest) -> List[FieldError]:
    """Rules for the replacement password; the current password is checked separately."""
    errors: List[FieldError] = []
    _check_new_password(errors, "password", request.password)
    return errors


def _check_name(
    errors: List[FieldError], field: str, label: str, value: Optional[str], *, required: bool
) -> None:
    if value is None:
        if required:
            errors.append(FieldError(field, "required", f"{label} is required"))
        return
    length = len(value.strip())
    if length < NAME_MIN_LENGTH:
        errors.append(FieldError(field, "too_short", f"{label} must be at least {NAME_MIN_LENGTH} characters"))
    elif length > NAME_MAX_LENGTH:
        errors.append(FieldError(field, "too_long", f"{label} cannot exceed {NAME_MAX_LENGTH} characters"))


def _check_email(errors: List[FieldError], value: Optional[str]) -> None:
    if not value:
        errors.append(FieldError("email", "required", "Email is required"))
        return
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        errors.append(FieldError("email", "invalid", "Please provide a valid email"))


def _check_new_password(errors: List[FieldError], field: str, value: Optional[str]) -> None:
    if not value:
        errors.append(FieldError(field, "required", "Password is required"))
    elif len(value) < PASSWORD_MIN_LENGTH:
        errors.append(
            FieldError(field, "too_short", f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
        )
    elif len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        errors.append(
            FieldError(field, "too_long", f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes")
        )
    elif not _PASSWORD_PATTERN.search(value):
        errors.append(
            FieldError(
                field,
                "weak",
                "Password must contain at least one uppercase letter, one lowercase letter, "
                "one number, and one special character",
            )
        )


def _check_phone(errors: List[FieldError], value: Optional[str]) -> None:
    if value is not None and not _PHONE_PATTERN.match(value):
        errors.append(FieldError("phone", "invalid", "Please provide a valid phone number"))


def _check_date_of_birth(errors: List[FieldError], value: Optional[str]) -> None:
    if value is None:
        return
    try:
        parsed = parse_date(value)
    except ValueError:
        errors.append(FieldError("dateOfBirth", "invalid", "Please provide a valid date of birth"))
        return
    if parsed > datetime.now(timezone.utc).date():
        errors.append(FieldError("dateOfBirth", "future", "Date of birth cannot be in the future"))


def _check_image(errors: List[FieldError], image: Optional[ImageUpload]) -> None:
    if image is None:
        return
    if not image.content_type.startswith("image/"):
        errors.append(FieldError("imageProfile", "invalid_type", "Only image files are allowed"))
    elif not image.content:
        errors.append(FieldError("imageProfile", "empty", "Image file is empty"))
    elif len(image.content) > MAX_IMAGE_BYTES:
        errors.append(FieldError("imageProfile", "too_large", "Image cannot exceed 5MB"))
