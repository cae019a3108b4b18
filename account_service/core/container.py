from dataclasses import dataclass

from ..application.services.auth_service import AuthService
from ..domain.ports.persistence import UserRepository
from ..services.email_service import EmailService
from ..services.image_uploader import CloudinaryImageUploader
from ..services.password_hasher import PasswordHasher
from ..services.session_tokens import SessionTokenIssuer
from .config import Settings


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    users: UserRepository
    password_hasher: PasswordHasher
    token_issuer: SessionTokenIssuer
    email_service: EmailService
    image_uploader: CloudinaryImageUploader
    auth_service: AuthService
