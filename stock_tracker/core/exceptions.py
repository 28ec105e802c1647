"""
HTTP error taxonomy raised by the dependencies and services.

Each class pins its status code and a default message so callers only
choose the category. Database failures are not modelled here; they are
answered with a generic 500 by the handler registered in ``main``.
"""
from typing import Optional

from fastapi import HTTPException, status


class StockTrackerError(HTTPException):
    """Base class for errors the API reports to clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Server error"
    headers: Optional[dict] = None

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=self.headers,
        )


class AuthenticationMissing(StockTrackerError):
    """No bearer token was supplied with the request."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Access denied. No token provided."
    headers = {"WWW-Authenticate": "Bearer"}


class AuthenticationExpired(StockTrackerError):
    """The token signature is valid but its ``exp`` claim has passed."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Session expired. Please log in again."
    headers = {"WWW-Authenticate": "Bearer"}


class AuthenticationInvalid(StockTrackerError):
    """Bad signature, malformed token or unusable claims."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid token"
    headers = {"WWW-Authenticate": "Bearer"}


class ValidationFailed(StockTrackerError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Validation failed"


class NotFound(StockTrackerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(StockTrackerError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"
