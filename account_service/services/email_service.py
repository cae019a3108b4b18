"""Service for sending account emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from ..domain.errors import NotificationError
from ..domain.models import User

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending verification and password reset emails via SMTP."""

    def __init__(
        self,
        base_url: str,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_username: Optional[str] = None,
        smtp_password: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: str = "Tour Booking",
        app_name: str = "Tour Booking",
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.smtp_host = smtp_host or ""
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username or ""
        self.smtp_password = smtp_password or ""
        self.from_email = from_email or self.smtp_username
        self.from_name = from_name
        self.app_name = app_name
        self.timeout = timeout
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def verification_url(self, token: str) -> str:
        return f"{self.base_url}/api/auth/verify-email?token={token}"

    def reset_url(self, token: str) -> str:
        return f"{self.base_url}/api/auth/reset-password?token={token}"

    def send_verification_email(self, user: User, token: str) -> None:
        """
        Send the email verification link.

        Args:
            user: Recipient account
            token: Verification token

        Raises:
            NotificationError: If delivery fails
        """
        verification_url = self.verification_url(token)
        if not self.enabled:
            logger.info("Email delivery disabled; verification URL for %s: %s", user.email, verification_url)
            return

        subject = f"Verify Your Email - {self.app_name}"
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h1 style="color: #1e293b;">Welcome to {self.app_name}!</h1>
                <p style="color: #475569; line-height: 1.6;">Hi {user.first_name},</p>
                <p style="color: #475569; line-height: 1.6;">
                    Please verify your email by clicking the button below:
                </p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{verification_url}"
                       style="background-color: #3b82f6; color: white; padding: 15px 30px;
                              text-decoration: none; border-radius: 5px; display: inline-block;
                              font-weight: bold;">
                        Verify Email
                    </a>
                </div>
                <p style="color: #64748b; font-size: 14px;">This link will expire in 24 hours.</p>
            </body>
        </html>
        """

        text_body = f"""
        Welcome to {self.app_name}!

        Hi {user.first_name},

        Please verify your email by opening the link below:
        {verification_url}

        This link will expire in 24 hours.
        """

        self._send_email(user.email, subject, html_body, text_body)

    def send_password_reset_email(self, user: User, token: str) -> None:
        """
        Send the password reset link.

        Raises:
            NotificationError: If delivery fails
        """
        reset_url = self.reset_url(token)
        if not self.enabled:
            logger.info("Email delivery disabled; password reset URL for %s: %s", user.email, reset_url)
            return

        subject = f"Password Reset - {self.app_name}"
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h1 style="color: #1e293b;">Password Reset Request</h1>
                <p style="color: #475569; line-height: 1.6;">Hi {user.first_name},</p>
                <p style="color: #475569; line-height: 1.6;">
                    You requested a password reset. Click the button below to choose a new password:
                </p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{reset_url}"
                       style="background-color: #3b82f6; color: white; padding: 15px 30px;
                              text-decoration: none; border-radius: 5px; display: inline-block;
                              font-weight: bold;">
                        Reset Password
                    </a>
                </div>
                <p style="color: #64748b; font-size: 14px;">This link will expire in 10 minutes.</p>
                <p style="color: #64748b; font-size: 14px;">
                    If you didn't request this, please ignore this email.
                </p>
            </body>
        </html>
        """

        text_body = f"""
        Password Reset Request

        Hi {user.first_name},

        You requested a password reset. Open the link below to choose a new password:
        {reset_url}

        This link will expire in 10 minutes.

        If you didn't request this, please ignore this email.
        """

        self._send_email(user.email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> None:
        """
        Send an email via SMTP.

        Args:
            to_email: Recipient email
            subject: Email subject
            html_body: HTML body
            text_body: Plain text body

        Raises:
            NotificationError: If the SMTP exchange fails
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self.from_name} <{self.from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(text_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            raise NotificationError() from exc
