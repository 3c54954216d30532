"""
Domain exceptions for the School Records API.

Controllers and core helpers raise these instead of ``HTTPException`` so the
same code runs outside a request. ``main.py`` registers one handler that turns
any ``SchoolRecordsError`` into ``{"detail": message}`` with its status code.
"""

from fastapi import status


class SchoolRecordsError(Exception):
    """Base exception for all School Records errors"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ── 400 ───────────────────────────────────────────────────────────────
class BadRequestError(SchoolRecordsError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid request payload"


# ── 401 ───────────────────────────────────────────────────────────────
class UnauthorizedError(SchoolRecordsError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InvalidOrExpiredOTP(UnauthorizedError):
    default_message = "invalid or expired otp"


class IncorrectPassword(UnauthorizedError):
    default_message = "incorrect password"


class InvalidToken(UnauthorizedError):
    default_message = "Invalid or missing token"


# ── 404 ───────────────────────────────────────────────────────────────
class NotFoundError(SchoolRecordsError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


# ── 409 ───────────────────────────────────────────────────────────────
class ConflictError(SchoolRecordsError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class DuplicateID(ConflictError):
    default_message = "ID already exists"


class DuplicateEmail(ConflictError):
    default_message = "Email already exists"


class RevisionConflict(ConflictError):
    default_message = "Document update conflict"


# ── 500 ───────────────────────────────────────────────────────────────
class InternalError(SchoolRecordsError):
    pass


class DeliveryFailed(InternalError):
    default_message = "failed to send OTP"
