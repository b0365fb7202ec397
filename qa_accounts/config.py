"""Flask configuration."""
import secrets
import os

#################### General config for app ####################
SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(16))
"""Sets the `Flask` secret key. Not used for auth tokens."""

#################### JWT auth configs ####################
JWT_SECRET = os.environ.get('JWT_SECRET', secrets.token_urlsafe(16))
"""Secret used to sign and verify bearer tokens.

Set this explicitly in any deployment with more than one worker, otherwise
each worker generates its own secret and rejects the others' tokens."""

JWT_EXPIRES_IN = int(os.environ.get('JWT_EXPIRES_IN', '86400'))
"""Lifetime of an issued token, in seconds."""

AUTH_SESSION_COOKIE_NAME = os.environ.get('AUTH_SESSION_COOKIE_NAME',
                                          'qa_auth_token')
AUTH_SESSION_COOKIE_DOMAIN = os.environ.get('AUTH_SESSION_COOKIE_DOMAIN')
AUTH_SESSION_COOKIE_SECURE = bool(int(os.environ.get('AUTH_SESSION_COOKIE_SECURE', '1')))

#################### Database ####################
SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite://')
"""Users database. Defaults to an in-memory SQLite database."""

SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))
"""Create the users table on startup. Useful for dev and tests."""

#################### Passwords ####################
BCRYPT_ROUNDS = int(os.environ.get('BCRYPT_ROUNDS', '12'))
"""bcrypt work factor used when hashing new passwords."""

#################### Logging ####################
LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
LOG_JSON = bool(int(os.environ.get('LOG_JSON', '1')))
"""Emit log records as JSON objects on stderr."""

VERSION = '0.1.0'
"""The application version."""
