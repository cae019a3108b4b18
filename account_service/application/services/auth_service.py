from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set

from fastapi import status

from ...domain.errors import (
    AccountNotFoundError,
    AccountStateError,
    CredentialError,
    DuplicateError,
    FieldError,
    IncorrectPasswordError,
    NotificationError,
    TokenError,
    TokenErrorKind,
    ValidationError,
)
from ...domain.models import AuthContext, User, UserRole, UserStatus
from ...domain.ports.notifications import Notifier
from ...domain.ports.persistence import UserRepository
from ...domain.ports.storage import ImageUploader
from ...services.password_hasher import PasswordHasher
from ...services.session_tokens import SessionTokenIssuer
from ...services.tokens import (
    EMAIL_VERIFICATION_TTL,
    PASSWORD_RESET_TTL,
    expiry_after,
    generate_token,
    utcnow,
)
from ..requests import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)
from ..validation import (
    PASSWORD_MAX_BYTES,
    parse_date,
    validate_forgot_password,
    validate_login,
    validate_new_password,
    validate_register,
    validate_reset_password,
    validate_update_profile,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthResult:
    token: str
    user: User


class AuthService:
    """Coordinates registration, login, token flows and authenticated account changes."""

    def __init__(
        self,
        users: UserRepository,
        hasher: PasswordHasher,
        token_issuer: SessionTokenIssuer,
        notifier: Notifier,
        image_uploader: ImageUploader,
    ) -> None:
        self._users = users
        self._hasher = hasher
        self._tokens = token_issuer
        self._notifier = notifier
        self._uploader = image_uploader
        self._pending: Set[asyncio.Task[None]] = set()
        self._placeholder_hash: Optional[str] = None

    # Public flows -----------------------------------------------------------
    async def register(self, request: RegisterRequest) -> AuthResult:
        _raise_if_invalid(validate_register(request))

        if self._users.find_by_email(request.email):
            raise DuplicateError()

        profile_image_url = None
        if request.image is not None:
            profile_image_url = await self._uploader.upload(
                request.image.content,
                content_type=request.image.content_type,
                filename=request.image.filename,
            )

        password_hash = await self._hash(request.password)
        verification_token = generate_token()
        try:
            user = self._users.create(
                email=request.email,
                password_hash=password_hash,
                first_name=request.first_name.strip(),
                last_name=request.last_name.strip(),
                phone=request.phone,
                date_of_birth=parse_date(request.date_of_birth) if request.date_of_birth else None,
                profile_image_url=profile_image_url,
                role=UserRole(request.role) if request.role else UserRole.CLIENT,
                email_verification_token=verification_token,
                email_verification_expires=expiry_after(EMAIL_VERIFICATION_TTL),
            )
        except DuplicateError:
            if profile_image_url:
                logger.warning("Duplicate registration left uploaded image %s unreferenced.", profile_image_url)
            raise
        logger.info("Registered user %s with role %s.", user.id, user.role.value)

        self._dispatch_verification_email(user, verification_token)
        return AuthResult(token=self._issue_session(user), user=user)

    async def login(self, request: LoginRequest) -> AuthResult:
        _raise_if_invalid(validate_login(request))

        user = self._users.find_by_email(request.email)
        password_hash = user.password_hash if user else await self._missing_user_hash()
        if not await self._verify(request.password, password_hash) or not user:
            logger.info("Rejected login attempt.")
            raise CredentialError()
        if not user.is_active():
            raise AccountStateError()

        updated = self._users.update(user.id, {"last_login_at": utcnow()})
        if updated is None:
            raise CredentialError()
        logger.info("User %s logged in.", updated.id)
        return AuthResult(token=self._issue_session(updated), user=updated)

    async def forgot_password(self, request: ForgotPasswordRequest) -> None:
        _raise_if_invalid(validate_forgot_password(request))

        user = self._users.find_by_email(request.email)
        if not user:
            raise AccountNotFoundError("No user found with this email")

        reset_token = generate_token()
        updated = self._users.update(
            user.id,
            {
                "password_reset_token": reset_token,
                "password_reset_expires": expiry_after(PASSWORD_RESET_TTL),
            },
        )
        if updated is None:
            raise AccountNotFoundError("No user found with this email")
        logger.info("Password reset requested for user %s.", user.id)

        try:
            await asyncio.to_thread(self._notifier.send_password_reset_email, updated, reset_token)
        except NotificationError as exc:
            logger.error("Password reset email for user %s could not be delivered.", user.id)
            self._users.update(
                user.id,
                {"password_reset_token": None, "password_reset_expires": None},
                expected={"password_reset_token": reset_token},
            )
            raise NotificationError("Error sending reset email") from exc

    async def reset_password(self, request: ResetPasswordRequest) -> None:
        _raise_if_invalid(validate_reset_password(request))

        invalid = TokenError(TokenErrorKind.INVALID, "Invalid or expired reset token")
        user = self._users.find_by_reset_token(request.token, utcnow())
        if not user:
            raise invalid

        password_hash = await self._hash(request.password)
        updated = self._users.update(
            user.id,
            {
                "password_hash": password_hash,
                "password_reset_token": None,
                "password_reset_expires": None,
            },
            expected={"password_reset_token": request.token},
        )
        if updated is None:
            raise invalid
        logger.info("Password reset completed for user %s.", user.id)

    async def verify_email(self, token: Optional[str]) -> User:
        if not token:
            raise ValidationError([FieldError("token", "required", "Verification token is required")])

        invalid = TokenError(TokenErrorKind.INVALID, "Invalid or expired verification token")
        user = self._users.find_by_verification_token(token, utcnow())
        if not user:
            raise invalid

        updated = self._users.update(
            user.id,
            {
                "is_email_verified": True,
                "email_verification_token": None,
                "email_verification_expires": None,
            },
            expected={"email_verification_token": token},
        )
        if updated is None:
            raise invalid
        logger.info("Email verified for user %s.", user.id)
        return updated

    async def resend_verification(self, request: ForgotPasswordRequest) -> None:
        """Issue a fresh verification token; unknown emails are answered silently."""
        _raise_if_invalid(validate_forgot_password(request))

        user = self._users.find_by_email(request.email)
        if not user:
            return
        if user.is_email_verified:
            raise ValidationError([FieldError("email", "already_verified", "Email already verified")])

        verification_token = generate_token()
        updated = self._users.update(
            user.id,
            {
                "email_verification_token": verification_token,
                "email_verification_expires": expiry_after(EMAIL_VERIFICATION_TTL),
            },
        )
        if updated is not None:
            self._dispatch_verification_email(updated, verification_token)

    # Authenticated flows ----------------------------------------------------
    async def authenticate(self, token: str) -> AuthContext:
        """Verify a session token and confirm the account behind it may still act."""
        identity = self._tokens.verify(token)
        user = self._users.find_by_id(identity.subject_id)
        if not user:
            raise TokenError(
                TokenErrorKind.INVALID,
                "User not found, authorization denied",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        if not user.is_active():
            raise AccountStateError()
        return identity

    async def get_profile(self, identity: AuthContext) -> User:
        return self._require_user(identity)

    async def update_profile(self, identity: AuthContext, request: UpdateProfileRequest) -> User:
        _raise_if_invalid(validate_update_profile(request))
        user = self._require_user(identity)

        changes: Dict[str, Any] = {}
        if request.first_name is not None:
            changes["first_name"] = request.first_name.strip()
        if request.last_name is not None:
            changes["last_name"] = request.last_name.strip()
        if request.phone is not None:
            changes["phone"] = request.phone
        if request.date_of_birth is not None:
            changes["date_of_birth"] = parse_date(request.date_of_birth)
        if request.image is not None:
            changes["profile_image_url"] = await self._uploader.upload(
                request.image.content,
                content_type=request.image.content_type,
                filename=request.image.filename,
            )

        if not changes:
            return user
        updated = self._users.update(user.id, changes)
        if updated is None:
            raise AccountNotFoundError()
        return updated

    async def update_password(self, identity: AuthContext, request: UpdatePasswordRequest) -> None:
        if not request.current_password:
            raise ValidationError(
                [FieldError("currentPassword", "required", "Current password is required")]
            )
        user = self._require_user(identity)
        if not await self._verify(request.current_password, user.password_hash):
            raise IncorrectPasswordError()

        _raise_if_invalid(validate_new_password(request))
        password_hash = await self._hash(request.password)
        updated = self._users.update(
            user.id,
            {"password_hash": password_hash},
            expected={"password_hash": user.password_hash},
        )
        if updated is None:
            raise IncorrectPasswordError()
        logger.info("Password updated for user %s.", user.id)

    # Lifecycle --------------------------------------------------------------
    async def ensure_default_admin(self, email: Optional[str], password: Optional[str]) -> Optional[User]:
        if not email or not password:
            return None
        existing = self._users.find_by_email(email)
        if existing:
            return existing
        if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValidationError(
                [FieldError("password", "too_long", f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes")]
            )
        logger.info("Creating default administrator account for %s", email)
        return self._users.create(
            email=email,
            password_hash=await self._hash(password),
            first_name="Admin",
            last_name="User",
            role=UserRole.ADMIN,
            status=UserStatus.ACTIVE,
            is_email_verified=True,
        )

    async def aclose(self) -> None:
        """Wait for verification emails still being delivered in the background."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    # Helpers ----------------------------------------------------------------
    def _require_user(self, identity: AuthContext) -> User:
        user = self._users.find_by_id(identity.subject_id)
        if not user:
            raise AccountNotFoundError()
        return user

    def _issue_session(self, user: User) -> str:
        return self._tokens.issue(AuthContext(subject_id=user.id, email=user.email, role=user.role))

    async def _hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hasher.hash, password)

    async def _verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._hasher.verify, password, password_hash)

    async def _missing_user_hash(self) -> str:
        """Cached placeholder digest checked when the login email is unknown."""
        if self._placeholder_hash is None:
            self._placeholder_hash = await self._hash(generate_token(16))
        return self._placeholder_hash

    def _dispatch_verification_email(self, user: User, token: str) -> None:
        task = asyncio.get_running_loop().create_task(
            self._deliver_verification_email(user, token), name="verification-email"
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver_verification_email(self, user: User, token: str) -> None:
        try:
            await asyncio.to_thread(self._notifier.send_verification_email, user, token)
        except Exception:
            logger.warning("Verification email for user %s could not be delivered.", user.id, exc_info=True)


def _raise_if_invalid(errors: List[FieldError]) -> None:
    if errors:
        raise ValidationError(errors)
