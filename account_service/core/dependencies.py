from fastapi import Depends, Request

from ..application.services.auth_service import AuthService
from .container import ApplicationContainer


def get_container(request: Request) -> ApplicationContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Account service container is not ready; was the lifespan started?")
    return container


def get_auth_service(container: ApplicationContainer = Depends(get_container)) -> AuthService:
    return container.auth_service
