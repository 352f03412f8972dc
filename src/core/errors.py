"""Domain exceptions raised by the service layer.

Route handlers translate these into HTTP status codes. Plain ``ValueError``
is used for bad input (400), matching the rest of the service layer.
"""


class TicketDeskError(Exception):
    """Base class for domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TicketDeskError):
    """The requested record does not exist (or is not visible to the caller)."""

    status_code = 404


class PermissionDeniedError(TicketDeskError):
    """The caller is authenticated but not allowed to perform the action."""

    status_code = 403


class AuthenticationError(TicketDeskError):
    """Credentials or tokens were rejected."""

    status_code = 401


class ExternalServiceError(TicketDeskError):
    """An upstream provider (OAuth, LLM) failed."""

    status_code = 502

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedMediaTypeError(TicketDeskError):
    """An uploaded file has a type that is not accepted."""

    status_code = 415
