"""Domain error taxonomy.

Services raise these; the HTTP layer renders them as
``{"message": ..., "error": <code>, ...}`` with the carried status code.
"""

from __future__ import annotations

from typing import Any

from fastapi import status
from pydantic.alias_generators import to_camel


class PMSystemError(Exception):
    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        extra = {to_camel(key): value for key, value in self.extra.items()}
        return {"message": self.message, "error": self.code, **extra}


class NotFoundError(PMSystemError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class InvalidReferenceError(PMSystemError):
    """A foreign key does not resolve to an active row."""

    code = "invalid_reference"


class ConflictError(PMSystemError):
    code = "conflict"


class InvalidRangeError(PMSystemError):
    code = "invalid_range"


class PreconditionFailedError(PMSystemError):
    code = "precondition_failed"


class UnauthenticatedError(PMSystemError):
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class UnauthorizedError(PMSystemError):
    code = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN
