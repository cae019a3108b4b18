"""Pydantic schemas for the account API endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class LoginPayload(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class EmailPayload(BaseModel):
    """Body for forgot-password and resend-verification."""

    email: Optional[str] = None


class ResetPasswordPayload(BaseModel):
    password: Optional[str] = None


class UpdatePasswordPayload(BaseModel):
    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    password: Optional[str] = None
