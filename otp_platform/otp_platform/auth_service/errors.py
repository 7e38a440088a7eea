"""
Error taxonomy for the auth flows.

Every flow operation translates collaborator failures into one of these
before a response is produced; the handlers registered in ``main`` turn
them into ``{"error": detail}`` bodies with the matching status code.
"""
from fastapi import status


class AuthError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Something went wrong!"

    def __init__(self, detail: str = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class ValidationError(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid request"


class InvalidCredentials(AuthError):
    # Same response whether the email or the password was wrong
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid credentials"


class EmailInUse(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Email already in use"


class InvalidOrExpiredOtp(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid or expired OTP"


class UserNotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "User not found"


class MissingToken(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Authorization token required"


class InvalidToken(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid or expired token"


class UserCreationFailed(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Failed to create user"


class UpstreamUnavailable(AuthError):
    """A collaborator (database or mail relay) failed or timed out; safe to retry."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Service temporarily unavailable, please retry"
