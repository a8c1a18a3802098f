class AppError(Exception):
    """Base for failures that are reported to the client as
    ``{"success": false, "error": message}`` with ``status_code``."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request."


class AuthError(AppError):
    status_code = 401
    default_message = "Unauthorized."


class ForbiddenError(AuthError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found."


class ConflictError(AppError):
    # Clients treat "already done" the same as other bad requests.
    status_code = 400
    default_message = "Request conflicts with current state."


class ServiceUnavailableError(AppError):
    status_code = 503
    default_message = "Service unavailable. Please retry."


class InternalError(AppError):
    status_code = 500
