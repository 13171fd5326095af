"""
Domain errors for the signup service.

Services raise these; the API blueprints translate them to JSON responses
using ``status_code`` and ``to_dict()``.
"""

from typing import Any, Optional


class SignupError(Exception):
    """Base exception for all signup errors."""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details,
        }


class Unauthenticated(SignupError):
    status_code = 401


class ValidationFailed(SignupError):
    status_code = 400


class NotFound(SignupError):
    status_code = 404


class RegistrationClosed(SignupError):
    """The game is frozen; registrations can no longer change."""

    status_code = 409


class AlreadyRegistered(SignupError):
    status_code = 409


class PersistenceFailure(SignupError):
    """The database rejected or failed an operation.

    The message is deliberately generic; the underlying error is logged.
    """

    status_code = 500

    def __init__(self, message: str = 'Storage operation failed', **kwargs):
        super().__init__(message, **kwargs)
