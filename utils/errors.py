"""
Error taxonomy shared by the gateway, the favorites store and the routers.

Every error carries the HTTP status it maps to; ``main.py`` renders them as
``{"status": "error", "message": ...}``.
"""
from typing import Optional


class AppError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class GatewayError(AppError):
    """A country API call failed: non-2xx response or transport failure."""

    status_code = 502
    default_message = "Country data service unavailable"

    def __init__(self, upstream_status: Optional[int] = None, body: str = ""):
        self.upstream_status = upstream_status
        self.body = body
        if upstream_status is None:
            message = f"Country data request failed: {body}" if body else None
        else:
            message = f"Country data request failed with status {upstream_status}"
        super().__init__(message)


class AuthError(AppError):
    status_code = 401
    default_message = "Token is not valid"


class InvalidCredentialsError(AuthError):
    status_code = 400
    default_message = "Invalid credentials"


class DuplicateError(AppError):
    status_code = 400
    default_message = "Already exists"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"
