import os
import re
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/accounts.db")).resolve()
        self.jwt_secret = os.getenv("JWT_SECRET", "change-me")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.jwt_expires_in = self._get_duration("JWT_EXPIRE", default="7d")
        self.bcrypt_rounds = self._get_int("BCRYPT_ROUNDS", default=12)
        self.frontend_base_url = os.getenv("FRONTEND_URL", "http://localhost:3000")
        self.app_name = os.getenv("APP_NAME", "Tour Booking")
        self.smtp_host = os.getenv("SMTP_HOST", "")
        self.smtp_port = self._get_int("SMTP_PORT", default=587)
        self.smtp_username = os.getenv("SMTP_USERNAME", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")
        self.smtp_from_email = os.getenv("SMTP_FROM_EMAIL", "")
        self.email_from_name = os.getenv("EMAIL_FROM_NAME", self.app_name)
        self.cloudinary_cloud_name = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.cloudinary_api_key = os.getenv("CLOUDINARY_API_KEY")
        self.cloudinary_api_secret = os.getenv("CLOUDINARY_API_SECRET")
        self.admin_default_email = os.getenv("ADMIN_EMAIL")
        self.admin_default_password = os.getenv("ADMIN_PASSWORD")
        origins = os.getenv("CORS_ALLOW_ORIGINS")
        if origins:
            self.cors_allow_origins = [item.strip() for item in origins.split(",") if item.strip()]
        else:
            self.cors_allow_origins = ["*"]

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_duration(key: str, default: str) -> timedelta:
        """Parse ``<n>[smhdw]`` durations such as ``7d`` or ``12h``; bare numbers are seconds."""
        value = os.getenv(key) or default
        match = _DURATION_PATTERN.match(value)
        if not match or int(match.group(1)) == 0:
            raise RuntimeError(f"Environment variable {key} must be a duration like 7d, 12h or 3600")
        amount, unit = match.groups()
        return timedelta(**{_DURATION_UNITS[unit]: int(amount)})
