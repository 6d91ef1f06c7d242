"""Error taxonomy for admin API operations."""

from __future__ import annotations


class AdminApiError(Exception):
    """Base class for every failure raised by the sync engine."""


class NetworkFailure(AdminApiError):
    """Non-2xx response or transport error. Carries the HTTP status when known."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class SchemaInvalid(AdminApiError):
    """Detail body is not a well-formed record or has no title."""

    def __init__(self, message: str = "Invalid detail schema") -> None:
        super().__init__(message)


class Cancelled(AdminApiError):
    """The operation was superseded or its view was torn down.

    Never shown to the user.
    """

    def __init__(self, message: str = "Operation cancelled") -> None:
        super().__init__(message)


class ValidationFailure(AdminApiError):
    """Form input rejected locally, before any network call."""
