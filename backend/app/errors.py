"""
Domain Errors
Services raise these to express business rule violations. The error
middleware maps each ``kind`` to an HTTP status code.
"""

import enum
from typing import Dict, List, Optional


class ErrorKind(str, enum.Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    INTERNAL = "internal"


class DomainError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(DomainError):
    """Request could not be parsed."""

    kind = ErrorKind.BAD_REQUEST


class UnauthorizedError(DomainError):
    """Missing or invalid credentials."""

    kind = ErrorKind.UNAUTHORIZED


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(DomainError):
    """Entity with the same unique key already exists."""

    kind = ErrorKind.CONFLICT


class RequestValidationFailed(DomainError):
    """Input failed schema validation."""

    kind = ErrorKind.VALIDATION

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        super().__init__(message or "Validation failed")
        self.errors = errors
