"""Password hashing."""

import logging
from functools import lru_cache

import bcrypt
from flask import current_app, has_app_context

from ..domain import password_too_long

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12


def _rounds() -> int:
    if has_app_context():
        return int(current_app.config.get('BCRYPT_ROUNDS', DEFAULT_ROUNDS))
    return DEFAULT_ROUNDS


def hash_password(password: str) -> str:
    """Generate a salted bcrypt hash of a password.

    Raises :class:`ValueError` if the password is longer than bcrypt can hash;
    callers are expected to have validated the length already.
    """
    if password_too_long(password):
        raise ValueError('Password is too long to hash')
    salt = bcrypt.gensalt(rounds=_rounds())
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('ascii')


def check_password(password: str, encrypted: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    if not password or not encrypted or password_too_long(password):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'),
                              encrypted.encode('ascii'))
    except ValueError:
        logger.warning('Stored password hash is malformed')
        return False


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(b'no such user', salt).decode('ascii')


def dummy_check(password: str) -> bool:
    """
    Spend as long as :func:`check_password` would on a real hash.

    Used when there is no stored hash to check against, so that a missing
    account takes as long to reject as a wrong password. Always ``False``.
    """
    check_password(password, _dummy_hash(_rounds()))
    return False

