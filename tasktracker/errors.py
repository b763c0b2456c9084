class TaskTrackerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(TaskTrackerError):
    """A required field is missing or malformed; raised before any external call."""

    status_code = 400


class NotFoundError(TaskTrackerError):
    status_code = 404


class AuthError(TaskTrackerError):
    """The identity provider rejected a credential or flow.

    ``reason`` is the provider-supplied code (e.g. ``INVALID_PASSWORD``).
    """

    status_code = 401

    def __init__(self, reason, message=None):
        super().__init__(message or reason)
        self.reason = reason


class TransportError(TaskTrackerError):
    """An external service was unreachable or failed unexpectedly."""

    status_code = 502
