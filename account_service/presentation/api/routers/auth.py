"""API router for account registration, authentication and profile management."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ....application.requests import (
    ForgotPasswordRequest,
    ImageUpload,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)
from ....application.services.auth_service import AuthService
from ....core.dependencies import get_auth_service
from ....domain.models import AuthContext, User
from ...api.responses import success
from ...api.dependencies import get_current_identity
from ...api.schemas.auth import (
    EmailPayload,
    LoginPayload,
    ResetPasswordPayload,
    UpdatePasswordPayload,
)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    email: Optional[str] = Form(default=None),
    password: Optional[str] = Form(default=None),
    first_name: Optional[str] = Form(default=None, alias="firstName"),
    last_name: Optional[str] = Form(default=None, alias="lastName"),
    phone: Optional[str] = Form(default=None),
    date_of_birth: Optional[str] = Form(default=None, alias="dateOfBirth"),
    role: Optional[str] = Form(default=None),
    image_profile: Optional[UploadFile] = File(default=None, alias="imageProfile"),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new account and return a session token."""
    result = await auth_service.register(
        RegisterRequest(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            date_of_birth=date_of_birth,
            role=role,
            image=await _read_image(image_profile),
        )
    )
    return success(
        message="User registered successfully. Please check your email for verification.",
        data={"token": result.token, "user": serialize_user(result.user)},
    )


@router.post("/login")
async def login(
    payload: LoginPayload,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    result = await auth_service.login(LoginRequest(email=payload.email, password=payload.password))
    return success(
        message="Login successful",
        data={"token": result.token, "user": serialize_user(result.user)},
    )


@router.get("/verify-email")
async def verify_email(
    token: Optional[str] = Query(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    await auth_service.verify_email(token)
    return success(message="Email verified successfully")


@router.post("/resend-verification")
async def resend_verification(
    payload: EmailPayload,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    await auth_service.resend_verification(ForgotPasswordRequest(email=payload.email))
    return success(message="If the email exists, a verification email has been sent.")


@router.post("/forgot-password")
async def forgot_password(
    payload: EmailPayload,
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    await auth_service.forgot_password(ForgotPasswordRequest(email=payload.email))
    return success(message="Password reset email sent")


@router.post("/reset-password")
async def reset_password(
    payload: ResetPasswordPayload,
    token: Optional[str] = Query(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    await auth_service.reset_password(ResetPasswordRequest(token=token, password=payload.password))
    return success(message="Password reset successful")


@router.get("/me")
async def get_profile(
    identity: AuthContext = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    user = await auth_service.get_profile(identity)
    return success(data={"user": serialize_user(user)})


@router.patch("/update-profile")
async def update_profile(
    first_name: Optional[str] = Form(default=None, alias="firstName"),
    last_name: Optional[str] = Form(default=None, alias="lastName"),
    phone: Optional[str] = Form(default=None),
    date_of_birth: Optional[str] = Form(default=None, alias="dateOfBirth"),
    image_profile: Optional[UploadFile] = File(default=None, alias="imageProfile"),
    identity: AuthContext = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    user = await auth_service.update_profile(
        identity,
        UpdateProfileRequest(
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            date_of_birth=date_of_birth,
            image=await _read_image(image_profile),
        ),
    )
    return success(message="Profile updated successfully", data={"user": serialize_user(user)})


@router.patch("/update-password")
async def update_password(
    payload: UpdatePasswordPayload,
    identity: AuthContext = Depends(get_current_identity),
    auth_service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    await auth_service.update_password(
        identity,
        UpdatePasswordRequest(current_password=payload.current_password, password=payload.password),
    )
    return success(message="Password updated successfully")


def serialize_user(user: User) -> Dict[str, Any]:
    """Public view of an account; secrets and single-use tokens are never included."""
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phone": user.phone,
        "dateOfBirth": user.date_of_birth.isoformat() if user.date_of_birth else None,
        "profileImage": user.profile_image_url,
        "role": user.role.value,
        "status": user.status.value,
        "isEmailVerified": user.is_email_verified,
        "lastLoginAt": _isoformat(user.last_login_at),
        "createdAt": _isoformat(user.created_at),
    }


def _isoformat(value) -> Optional[str]:
    return value.replace(microsecond=0).isoformat() if value else None


async def _read_image(upload: Optional[UploadFile]) -> Optional[ImageUpload]:
    if upload is None or not upload.filename:
        return None
    content = await upload.read()
    return ImageUpload(
        content=content,
        content_type=upload.content_type or "",
        filename=upload.filename,
    )
