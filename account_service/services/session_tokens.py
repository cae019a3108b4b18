from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

import jwt
from fastapi import status

from ..domain.errors import TokenError, TokenErrorKind
from ..domain.models import AuthContext, UserRole
from .tokens import utcnow

logger = logging.getLogger(__name__)

DEFAULT_SESSION_LIFETIME = timedelta(days=7)


class SessionTokenIssuer:
    """Signs and verifies self-contained bearer tokens carrying identity claims."""

    def __init__(
        self,
        secret_key: str,
        lifetime: timedelta = DEFAULT_SESSION_LIFETIME,
        algorithm: str = "HS256",
    ) -> None:
        if not secret_key:
            raise RuntimeError("JWT_SECRET is not configured.")
        if secret_key == "change-me":
            logger.warning("JWT_SECRET is using the default value. Configure a strong secret in production.")
        self._secret_key = secret_key
        self._lifetime = lifetime
        self._algorithm = algorithm

    def issue(self, claims: AuthContext, lifetime: Optional[timedelta] = None) -> str:
        now = utcnow()
        payload = {
            "sub": claims.subject_id,
            "email": claims.email,
            "role": claims.role.value,
            "iat": now,
            "exp": now + (lifetime if lifetime is not None else self._lifetime),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> AuthContext:
        """
        Decode a session token.

        Raises:
            TokenError: ``EXPIRED`` once past its expiry, ``BAD_SIGNATURE`` when
                signed with another secret, ``MALFORMED`` when it cannot be
                decoded and ``INVALID`` when required claims are missing.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise _session_error(TokenErrorKind.EXPIRED, "Token expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise _session_error(TokenErrorKind.BAD_SIGNATURE) from exc
        except jwt.DecodeError as exc:
            raise _session_error(TokenErrorKind.MALFORMED) from exc
        except jwt.InvalidTokenError as exc:
            raise _session_error(TokenErrorKind.INVALID) from exc

        try:
            return AuthContext(
                subject_id=str(payload["sub"]),
                email=str(payload.get("email", "")),
                role=UserRole(payload.get("role", UserRole.CLIENT.value)),
            )
        except ValueError as exc:
            raise _session_error(TokenErrorKind.INVALID) from exc


def _session_error(kind: TokenErrorKind, message: str = "Invalid token") -> TokenError:
    return TokenError(kind, message, status_code=status.HTTP_401_UNAUTHORIZED)
