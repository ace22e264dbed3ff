"""
Exceptions raised by the content store and lifecycle managers.

Every exception carries the HTTP status a request handler should answer with.
"""

from __future__ import annotations


class PressroomError(Exception):
    """Base exception for pressroom errors."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(PressroomError):
    """Missing or invalid input fields, or a title that yields no slug."""

    status_code = 400


class NotFoundError(PressroomError):
    """No document exists for the requested slug."""

    status_code = 404


class AlreadyExistsError(PressroomError):
    """A document already exists at the slug being created."""

    status_code = 409


class ConflictError(PressroomError):
    """The remote store rejected a write because its concurrency token was stale."""

    status_code = 409

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class RemoteError(PressroomError):
    """The remote API answered with an unexpected error."""

    status_code = 502

    def __init__(self, message: str, path: str | None = None, remote_status: int | None = None):
        self.path = path
        self.remote_status = remote_status
        super().__init__(message)


class RemoteUnavailableError(RemoteError):
    """The remote API could not be reached."""

    status_code = 503
