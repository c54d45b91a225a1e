"""
Error taxonomy shared by services and the HTTP boundary.

Services raise these; `acquisition.main` renders them as `ErrorResponse`
bodies with the status code carried by the class. Only `StorageError` is
worth retrying, and retrying is the caller's business.
"""
from __future__ import annotations

from typing import Any


class DomainError(Exception):
    status_code: int = 500
    code: str = "error"
    retryable: bool = False

    def __init__(self, message: str, *, details: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class NotFound(DomainError):
    status_code = 404
    code = "not_found"


class Forbidden(DomainError):
    status_code = 403
    code = "forbidden"


class InvalidState(DomainError):
    """Well-formed request that breaks a lifecycle or business rule."""

    status_code = 400
    code = "invalid_state"


class ValidationError(DomainError):
    status_code = 400
    code = "validation_error"


class Unauthenticated(DomainError):
    status_code = 401
    code = "unauthenticated"


class Conflict(DomainError):
    status_code = 409
    code = "conflict"


class RateLimited(DomainError):
    status_code = 429
    code = "rate_limited"


class StorageError(DomainError):
    status_code = 500
    code = "storage_error"
    retryable = True
