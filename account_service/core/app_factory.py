from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..application.services.auth_service import AuthService
from ..domain.errors import AccountError, ServerError
from ..infrastructure.persistence.sqlite import SQLiteUserRepository
from ..presentation.api import responses
from ..presentation.api.routers import auth as auth_router
from ..services.email_service import EmailService
from ..services.image_uploader import CloudinaryImageUploader
from ..services.password_hasher import PasswordHasher
from ..services.session_tokens import SessionTokenIssuer
from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging

logger = logging.getLogger(__name__)


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Account Service", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)
    _register_exception_handlers(app)

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {
            "status": "OK",
            "message": "Account service is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app


def build_container(settings: Settings) -> ApplicationContainer:
    users = SQLiteUserRepository(settings.database_path)
    password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    token_issuer = SessionTokenIssuer(
        secret_key=settings.jwt_secret,
        lifetime=settings.jwt_expires_in,
        algorithm=settings.jwt_algorithm,
    )
    email_service = EmailService(
        base_url=settings.frontend_base_url,
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username,
        smtp_password=settings.smtp_password,
        from_email=settings.smtp_from_email,
        from_name=settings.email_from_name,
        app_name=settings.app_name,
    )
    image_uploader = CloudinaryImageUploader(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
    )
    auth_service = AuthService(
        users=users,
        hasher=password_hasher,
        token_issuer=token_issuer,
        notifier=email_service,
        image_uploader=image_uploader,
    )
    return ApplicationContainer(
        settings=settings,
        users=users,
        password_hasher=password_hasher,
        token_issuer=token_issuer,
        email_service=email_service,
        image_uploader=image_uploader,
        auth_service=auth_service,
    )


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        container = build_container(settings)
        if not container.email_service.enabled:
            logger.warning("SMTP is not configured; account emails will only be logged.")
        if not container.image_uploader.enabled:
            logger.warning("Cloudinary is not configured; profile image uploads will be rejected.")

        await container.auth_service.ensure_default_admin(
            settings.admin_default_email, settings.admin_default_password
        )

        app.state.container = container  # type: ignore[attr-defined]

        try:
            yield
        finally:
            await container.auth_service.aclose()
            container.users.close()

    return lifespan


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AccountError)
    async def handle_account_error(request: Request, exc: AccountError) -> JSONResponse:
        if isinstance(exc, ServerError):
            logger.error("Server error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=responses.from_error(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
                "code": str(error.get("type", "invalid")),
                "message": str(error.get("msg", "Invalid value")),
            }
            for error in exc.errors()
        ]
        message = errors[0]["message"] if errors else "Invalid request"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=responses.failure(message, errors),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=responses.failure("Server error"),
        )
