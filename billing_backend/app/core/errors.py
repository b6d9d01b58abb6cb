"""
Exception hierarchy for the billing backend.

Every error carries the message that is shown to the caller and the
HTTP status used when it escapes a request handler.  Storage failures
collapse to one generic message per operation; the underlying cause
is logged, never returned.
"""

from __future__ import annotations

from fastapi import status


class BillingError(Exception):
    """Base class for errors raised by the billing backend."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(BillingError):
    """Fatal startup condition, e.g. no store connection descriptor."""

    default_message = "Invalid configuration."


class ValidationError(BillingError):
    """Caller input is missing required values."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request."


class MissingFieldError(ValidationError):
    default_message = "Missing required fields."

    def __init__(self, fields: list[str] | None = None, message: str | None = None) -> None:
        self.fields = list(fields or [])
        super().__init__(message)


class MissingParameterError(ValidationError):
    default_message = "Missing query parameters for comparison."

    def __init__(self, parameters: list[str] | None = None, message: str | None = None) -> None:
        self.parameters = list(parameters or [])
        super().__init__(message)


class StorageError(BillingError):
    """Any failure talking to or querying the bill store."""

    default_message = "Storage failure."
