"""Errors raised by pipelines and the registry."""

from __future__ import annotations

from typing import Any, Mapping

__all__ = [
    "PipelineError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "MethodNotImplementedError",
    "ConflictError",
    "RegistrationError",
]


class PipelineError(Exception):
    """Base error carrying the HTTP status a transport should answer with."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None, details: Mapping[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.details = dict(details) if details else None
        super().__init__(self.message)


class ValidationError(PipelineError):
    """Raised when pipeline input does not match its declared schema."""

    status_code = 400
    default_message = "Bad Request"


class UnauthorizedError(PipelineError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(PipelineError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(PipelineError):
    status_code = 404
    default_message = "Not Found"


class MethodNotImplementedError(PipelineError):
    """Raised when a pipeline does not support the requested operation."""

    status_code = 405
    default_message = "Method Not Allowed"


class ConflictError(PipelineError):
    status_code = 409
    default_message = "Conflict"


class RegistrationError(Exception):
    """Raised when a pipeline cannot be registered on the API."""
