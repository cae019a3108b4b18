"""
Pytest fixtures for account service tests
"""

from typing import List, Optional, Tuple

import pytest

from account_service.application.requests import RegisterRequest
from account_service.application.services.auth_service import AuthService
from account_service.domain.errors import NotificationError, UploadError
from account_service.domain.models import User
from account_service.infrastructure.persistence.sqlite import SQLiteUserRepository
from account_service.services.password_hasher import PasswordHasher
from account_service.services.session_tokens import SessionTokenIssuer

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"
STRONG_PASSWORD = "Str0ng!Pass"


class FakeNotifier:
    """Records outbound emails instead of sending them."""

    def __init__(self) -> None:
        self.verification_emails: List[Tuple[User, str]] = []
        self.reset_emails: List[Tuple[User, str]] = []
        self.fail_verification = False
        self.fail_reset = False

    def send_verification_email(self, user: User, token: str) -> None:
        if self.fail_verification:
            raise NotificationError("SMTP unavailable")
        self.verification_emails.append((user, token))

    def send_password_reset_email(self, user: User, token: str) -> None:
        if self.fail_reset:
            raise NotificationError("SMTP unavailable")
        self.reset_emails.append((user, token))


class FakeUploader:
    def __init__(self, url: str = "https://cdn.example.com/profile-images/avatar.png") -> None:
        self.url = url
        self.fail = False
        self.uploads: List[bytes] = []

    async def upload(self, content: bytes, *, content_type: str, filename: str = "") -> str:
        if self.fail:
            raise UploadError()
        self.uploads.append(content)
        return self.url


@pytest.fixture
def repository(tmp_path):
    repo = SQLiteUserRepository(tmp_path / "accounts.db")
    yield repo
    repo.close()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def token_issuer():
    return SessionTokenIssuer(secret_key=TEST_SECRET)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def auth_service(repository, hasher, token_issuer, notifier, uploader):
    return AuthService(
        users=repository,
        hasher=hasher,
        token_issuer=token_issuer,
        notifier=notifier,
        image_uploader=uploader,
    )


def make_register_request(
    email: str = "alice@example.com",
    password: str = STRONG_PASSWORD,
    first_name: Optional[str] = "Alice",
    last_name: Optional[str] = "Walker",
    **overrides,
) -> RegisterRequest:
    return RegisterRequest(
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        **overrides,
    )
