"""Defines the core data structures for the accounts service."""

from typing import Any, Dict, NamedTuple

ADMIN = 'admin'
MANAGER = 'manager'
TESTER = 'tester'
ROLES = (ADMIN, MANAGER, TESTER)
DEFAULT_ROLE = TESTER

MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72
"""bcrypt ignores (or refuses) anything past the 72nd byte."""


class User(NamedTuple):
    """Public view of a user record. Never carries the password."""

    user_id: str
    name: str
    email: str
    role: str = DEFAULT_ROLE
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Generate the JSON representation used by the API."""
        return {
            '_id': self.user_id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'isActive': self.is_active,
        }


class RegistrationData(NamedTuple):
    """
    Staged registration payload.

    Collected by the registration step and handed to the password-setup step,
    which creates the account once the user has chosen a new password.
    ``password`` is the provisional (default) password the user must re-enter.
    """

    name: str
    email: str
    password: str
    role: str = DEFAULT_ROLE


def normalize_email(email: str) -> str:
    """E-mail addresses are stored trimmed and lower-cased."""
    return email.strip().lower()


def password_too_long(password: str) -> bool:
    """Determine whether ``password`` exceeds what bcrypt can hash."""
    return len(password.encode('utf-8')) > MAX_PASSWORD_BYTES


def from_dict(data: Dict[str, Any]) -> User:
    """Build a :class:`.User` from its API representation."""
    return User(
        user_id=data['_id'],
        name=data['name'],
        email=data['email'],
        role=data.get('role', DEFAULT_ROLE),
        is_active=data.get('isActive', True),
    )
