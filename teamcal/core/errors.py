# teamcal/core/errors.py
"""
Application error taxonomy.

Every failure a service can report is an :class:`AppError` tagged with an
:class:`ErrorKind`. The HTTP layer picks the status code from ``kind``
(see ``teamcal.api.errors``), never from the message text.
"""

from __future__ import annotations

import enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, enum.Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    STORAGE = "STORAGE"

    @property
    def status_code(self) -> int:
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.STORAGE: 500,
}


class AppError(Exception):
    """Базовая ошибка приложения с типом (kind) и необязательными деталями по полям."""

    kind: ErrorKind = ErrorKind.STORAGE
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, details: Optional[List[Dict[str, Any]]] = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<{type(self).__name__} kind={self.kind.value} message={self.message!r}>"


class UnauthorizedError(AppError):
    kind = ErrorKind.UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden: Admin access required"


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION
    default_message = "Validation error"


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class RateLimitedError(AppError):
    kind = ErrorKind.RATE_LIMITED
    default_message = "Too Many Requests"


class StorageError(AppError):
    kind = ErrorKind.STORAGE
    default_message = "Internal server error"


def field_error(field: str, message: str) -> Dict[str, Any]:
    """Деталь ошибки в том же виде, что и у Pydantic: ``{"loc": [...], "msg": ...}``."""
    return {"loc": [field], "msg": message}


__all__ = [
    "ErrorKind", "AppError", "UnauthorizedError", "ForbiddenError",
    "ValidationError", "NotFoundError", "ConflictError", "RateLimitedError",
    "StorageError", "field_error",
]
