from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...application.services.auth_service import AuthService
from ...core.dependencies import get_auth_service
from ...domain.errors import TokenError, TokenErrorKind
from ...domain.models import AuthContext

_bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthContext:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise TokenError(
            TokenErrorKind.MALFORMED,
            "No token provided, authorization denied",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return await auth_service.authenticate(credentials.credentials)
