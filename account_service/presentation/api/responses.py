"""Response envelope helpers: ``{status, message, data?}``."""

from typing import Any, Dict, List, Optional

from ...domain.errors import AccountError, ValidationError


def success(message: Optional[str] = None, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": "success"}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def failure(message: str, errors: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": "error", "message": message}
    if errors:
        body["errors"] = errors
    return body


def from_error(exc: AccountError) -> Dict[str, Any]:
    errors = None
    if isinstance(exc, ValidationError):
        errors = [
            {"field": item.field, "code": item.code, "message": item.message}
            for item in exc.errors
        ]
    return failure(exc.message, errors)
