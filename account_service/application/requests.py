"""Typed inputs for the account flows, independent of the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class ImageUpload:
    content: bytes
    content_type: str
    filename: str = ""


@dataclass(frozen=True, slots=True)
class RegisterRequest:
    email: Optional[str]
    password: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    role: Optional[str] = None
    image: Optional[ImageUpload] = None


@dataclass(frozen=True, slots=True)
class LoginRequest:
    email: Optional[str]
    password: Optional[str]


@dataclass(frozen=True, slots=True)
class ForgotPasswordRequest:
    email: Optional[str]


@dataclass(frozen=True, slots=True)
class ResetPasswordRequest:
    token: Optional[str]
    password: Optional[str]


@dataclass(frozen=True, slots=True)
class UpdateProfileRequest:
    """Only the fields that are not ``None`` are applied."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[str] = None
    image: Optional[ImageUpload] = None


@dataclass(frozen=True, slots=True)
class UpdatePasswordRequest:
    current_password: Optional[str]
    password: Optional[str]
