"""
Integration with the users datastore.

This is the credential store: lookups by ID and e-mail, account creation,
password updates, and password authentication. E-mail uniqueness is enforced
by the ``unique`` constraint on :attr:`.DBUser.email`;
:func:`does_email_exist` is only a fast path for the common case, and
:func:`create` reports a constraint violation as :class:`DuplicateEmail`.
"""

import logging
from contextlib import contextmanager
from typing import Generator

from flask import Flask
from sqlalchemy.exc import IntegrityError, OperationalError

from ... import domain
from .. import passwords
from .models import db, DBUser

logger = logging.getLogger(__name__)


class NoSuchUser(RuntimeError):
    """User does not exist."""


class DuplicateEmail(RuntimeError):
    """A user with this e-mail address already exists."""


class PasswordAuthenticationFailed(RuntimeError):
    """Password is not correct."""


class AccountDeactivated(RuntimeError):
    """The account exists but has been deactivated."""


class Unavailable(RuntimeError):
    """The users database is temporarily unavailable."""


def init_app(app: Flask) -> None:
    """Set configuration defaults and attach the database to the app."""
    app.config.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite://')
    db.init_app(app)


def create_all() -> None:
    """Create all tables in the database."""
    db.create_all()


def drop_all() -> None:
    """Drop all tables in the database."""
    db.drop_all()


@contextmanager
def transaction() -> Generator:
    """Context manager for database transaction."""
    try:
        yield db.session
        if db.session.new or db.session.dirty or db.session.deleted:
            db.session.commit()
    except Exception as e:
        logger.warning('Commit failed, rolling back: %s', str(e))
        db.session.rollback()
        raise


def does_email_exist(email: str) -> bool:
    """Determine whether a user with a particular address already exists."""
    try:
        data = db.session.query(DBUser) \
            .filter(DBUser.email == domain.normalize_email(email)) \
            .first()
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    return data is not None


def get_user_by_id(user_id: str) -> DBUser:
    """Load a user record by ID."""
    try:
        db_user = db.session.get(DBUser, user_id)
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    if db_user is None:
        raise NoSuchUser('User does not exist')
    return db_user


def get_user_by_email(email: str) -> DBUser:
    """Load a user record by e-mail address."""
    try:
        db_user = db.session.query(DBUser) \
            .filter(DBUser.email == domain.normalize_email(email)) \
            .first()
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e
    if db_user is None:
        raise NoSuchUser('User does not exist')
    return db_user


def create(name: str, email: str, password: str,
           role: str = domain.DEFAULT_ROLE) -> domain.User:
    """
    Create a new user.

    Parameters
    ----------
    name : str
        Display name; leading and trailing whitespace is removed.
    email : str
        E-mail address; stored trimmed and lower-cased.
    password : str
        Plaintext password. Hashed when the row is written.
    role : str
        One of :data:`.domain.ROLES`.

    Returns
    -------
    :class:`.domain.User`
        Public data about the created user.

    Raises
    ------
    :class:`DuplicateEmail`
        The database already holds a user with this e-mail address.
    :class:`Unavailable`
        The database could not be reached.

    """
    db_user = DBUser(
        name=name.strip(),
        email=domain.normalize_email(email),
        password=password,
        role=role,
        is_active=True,
    )
    try:
        db.session.add(db_user)
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        raise DuplicateEmail('User with this email already exists') from e
    except OperationalError as e:
        db.session.rollback()
        raise Unavailable('Database is temporarily unavailable') from e
    logger.debug('Created user %s', db_user.user_id)
    return db_user.to_domain()


def set_password(db_user: DBUser, password: str) -> None:
    """Replace a user's password. The new password is hashed on write."""
    db_user.password = password
    try:
        with transaction() as session:
            session.add(db_user)
    except OperationalError as e:
        raise Unavailable('Database is temporarily unavailable') from e


def authenticate(email: str, password: str) -> domain.User:
    """
    Validate e-mail and password. If successful, return the user.

    Raises
    ------
    :class:`NoSuchUser`
    :class:`AccountDeactivated`
    :class:`PasswordAuthenticationFailed`

    """
    try:
        db_user = get_user_by_email(email)
    except NoSuchUser:
        # Unknown addresses take as long to reject as wrong passwords.
        passwords.dummy_check(password)
        raise
    if not db_user.compare_password(password):
        raise PasswordAuthenticationFailed('Incorrect password')
    if not db_user.is_active:
        raise AccountDeactivated('Account is deactivated')
    return db_user.to_domain()
