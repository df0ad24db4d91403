"""
Error taxonomy shared by the token authority and the user store.

Every service operation either returns its result or raises exactly one
of the classes below. The HTTP layer (api/errors.py) turns each into the
uniform error envelope using ``status_code`` and ``error_code``.
"""
from __future__ import annotations


class ServiceError(Exception):
    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    """Required input is missing or malformed."""
    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "All fields are required"


class NotFound(ServiceError):
    """The identity does not exist."""
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "User not found"


class Unauthorized(ServiceError):
    """Bad password, or an invalid, expired, mismatched or replayed token."""
    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized request"


class PersistenceError(ServiceError):
    """The store is unreachable or a write failed."""
