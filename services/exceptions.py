"""Service-layer exceptions. Each carries the HTTP status and error code the
API answers with; api/errors.py turns them into the JSON envelope."""
from __future__ import annotations

from typing import Optional


class ServiceError(Exception):
    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, *, details: Optional[dict] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details


class InvalidRequest(ServiceError):
    """Missing or malformed input (400)."""
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class Unauthorized(ServiceError):
    """Bad credentials or no token (401)."""
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    """Token invalid, expired, revoked or from an older token_version (403)."""
    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(ServiceError):
    status_code = 409
    error_code = "CONFLICT"
    default_message = "Conflict"


class InternalError(ServiceError):
    """Server-side fault such as an unreadable stored row (500)."""
