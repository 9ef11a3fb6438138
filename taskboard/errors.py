"""Typed errors raised by the services and mapped to HTTP responses in the app."""


class TaskboardError(Exception):
    status_code = 500
    default_message = "Server Error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(TaskboardError):
    status_code = 400
    default_message = "Invalid request"


class Unauthenticated(TaskboardError):
    status_code = 401
    default_message = "Not authorized, no token"


class Forbidden(TaskboardError):
    status_code = 403
    default_message = "Not authorized!"


class NotFound(TaskboardError):
    status_code = 404
    default_message = "Not Found"


class StoreError(TaskboardError):
    """Persistence failure. The message sent to clients is always generic."""

    status_code = 500
    default_message = "Server Error"
