"""
Error taxonomy shared by services and routes.

Each error is an ``HTTPException`` with a fixed status code, so services can
raise them directly and FastAPI renders them as ``{"detail": ...}``.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for expected, client-facing failures."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Bad request"

    def __init__(self, detail: str = None, headers: dict = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers
        )


class ValidationError(AppError):
    """Malformed input: bad dates, bad capacity bounds, bad image encoding."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class Unauthorized(AppError):
    """Missing bearer token or bad credentials."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication token is required."

    def __init__(self, detail: str = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidToken(Unauthorized):
    """Token present but malformed, expired or badly signed."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Token is invalid or has expired."


class Forbidden(AppError):
    """Authenticated but not entitled (not the host, not the owner)."""
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(AppError):
    """Duplicate username, duplicate join, duplicate review."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class InvalidState(AppError):
    """Action not valid for the trip's current status."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Action not allowed in the current trip status"
