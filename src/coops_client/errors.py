"""Error taxonomy for the CoOps client.

Callers branch on the error kind:
- UsageError: fix the request (raised before any I/O)
- UnauthorizedError: re-authenticate
- ForbiddenError: not permitted
- ServerError / TransportError: transient, maybe retry
- DecodeError: response was malformed
"""

from __future__ import annotations


class CoOpsError(Exception):
    """Base error for all client-level exceptions."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message)
        self.message = message


class UsageError(CoOpsError):
    """A method was called with arguments that violate its contract."""

    pass


class ServerError(CoOpsError):
    """Server answered with a non-successful status.

    The message is the response body text as sent by the server.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnauthorizedError(ServerError):
    """Server answered 401."""

    def __init__(self, message: str | None = None, status_code: int | None = 401) -> None:
        super().__init__(message, status_code)


class ForbiddenError(ServerError):
    """Server answered 403."""

    def __init__(self, message: str | None = None, status_code: int | None = 403) -> None:
        super().__init__(message, status_code)


class TransportError(CoOpsError):
    """Network or connection failure below the HTTP layer."""

    pass


class DecodeError(CoOpsError):
    """Response body is not valid JSON or a field could not be decoded."""

    pass


__all__ = [
    "CoOpsError",
    "UsageError",
    "ServerError",
    "UnauthorizedError",
    "ForbiddenError",
    "TransportError",
    "DecodeError",
]
