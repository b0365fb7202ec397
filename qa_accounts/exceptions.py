"""
Errors reported to API clients.

Each error is a :class:`werkzeug.exceptions.HTTPException`, so controllers can
raise it and the application's error handler turns it into the JSON error
envelope ``{"success": false, "error": ..., "field": ...}``. ``field`` names
the request field that the error belongs to, if any.
"""

from typing import Optional

from werkzeug.exceptions import HTTPException


class AccountsError(HTTPException):
    """Base class for errors with a place in the API error envelope."""

    field: Optional[str] = None

    def __init__(self, description: Optional[str] = None,
                 field: Optional[str] = None) -> None:
        super(AccountsError, self).__init__(description)
        if field is not None:
            self.field = field


class ValidationError(AccountsError):
    """Malformed, missing, or policy-violating input."""

    code = 400
    description = 'Invalid request'


class Unauthorized(AccountsError):
    """Missing or expired caller identity, or a deactivated account."""

    code = 401
    description = 'Unauthorized'


class NotFoundError(AccountsError):
    """The requested user does not exist."""

    code = 404
    description = 'User not found'


class ConflictError(AccountsError):
    """An account with the same e-mail address already exists."""

    code = 400
    description = 'User with this email already exists'


class InvalidCredentials(AccountsError):
    """The current password is wrong."""

    code = 400
    description = 'Current password is incorrect'


class SamePasswordError(AccountsError):
    """The new password matches the current one."""

    code = 400
    description = 'New password must be different from current password'


class InternalError(AccountsError):
    """Something unexpected went wrong. Details stay in the logs."""

    code = 500
    description = 'Internal server error'
