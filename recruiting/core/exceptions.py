"""
Service-layer errors.

Each error carries the HTTP status an outer layer would answer with, so the
services never depend on a web framework.
"""

from http import HTTPStatus
from typing import Iterable


class ServiceError(Exception):
    """Base class for business rule violations."""

    status_code: HTTPStatus = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class PermissionDenied(ServiceError):
    """Raised when the caller lacks the capability for an action."""

    status_code = HTTPStatus.FORBIDDEN


class NotFound(ServiceError):
    """Raised when a group, candidate or holiday does not exist."""

    status_code = HTTPStatus.NOT_FOUND

    @classmethod
    def missing(cls, label: str, missing_ids: Iterable[str]) -> "NotFound":
        return cls(f"{label}: {', '.join(str(i) for i in missing_ids)}")


class InvalidOperation(ServiceError):
    """Raised when a request would be a no-op (empty diff, empty group...)."""

    status_code = HTTPStatus.BAD_REQUEST


class Conflict(ServiceError):
    """Raised when a write loses against a storage uniqueness constraint."""

    status_code = HTTPStatus.CONFLICT
