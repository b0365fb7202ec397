"""
Functions for working with auth tokens on user requests.

A token is an HS256 JWT carrying the user's ID, e-mail and role. It is issued
at login and presented on later requests either as an ``Authorization:
Bearer`` header or as the auth cookie. :class:`IdentityResolver` maps a request
to the ID of the calling user; it is registered on the application by
:func:`init_app`, so tests can substitute their own resolver.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt
from pytz import UTC
from flask import Flask, Request, current_app

from .. import domain

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'
EXTENSION_KEY = 'identity_resolver'


class InvalidToken(ValueError):
    """Token is malformed, forged, or missing required claims."""


class ExpiredToken(InvalidToken):
    """Token was valid but its lifetime has passed."""


def generate_token(user: domain.User, secret: str,
                   expires_in: int = 86400) -> str:
    """Issue a signed token for ``user``."""
    now = datetime.now(tz=UTC)
    claims = {
        'userId': user.user_id,
        'email': user.email,
        'role': user.role,
        'iat': now,
        'exp': now + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode(token: str, secret: str) -> Dict[str, Any]:
    """Verify a token and return its claims."""
    try:
        claims: Dict[str, Any] = jwt.decode(
            token, secret, algorithms=[ALGORITHM],
            options={'require': ['exp', 'userId']}
        )
    except jwt.exceptions.ExpiredSignatureError as e:
        raise ExpiredToken('Token has expired') from e
    except jwt.exceptions.InvalidTokenError as e:
        raise InvalidToken('Not a valid token') from e
    if not isinstance(claims['userId'], str) or not claims['userId']:
        raise InvalidToken('Token has no usable user ID')
    return claims


class IdentityResolver(object):
    """Resolves the caller's user ID from request credentials."""

    def __init__(self, secret: str, cookie_name: str) -> None:
        self.secret = secret
        self.cookie_name = cookie_name

    def resolve(self, request: Request) -> Optional[str]:
        """
        Get the ID of the user making ``request``.

        Returns ``None`` if the request carries no credentials, or if they
        are malformed, forged or expired.
        """
        token = self._get_token(request)
        if token is None:
            logger.debug('No auth token on request')
            return None
        try:
            claims = decode(token, self.secret)
        except ExpiredToken:
            logger.debug('Auth token has expired')
            return None
        except InvalidToken as e:
            logger.info('Auth token not valid: %s', e)
            return None
        user_id: str = claims['userId']
        return user_id

    def _get_token(self, request: Request) -> Optional[str]:
        # Try the header first, then the cookie set at login.
        auth_header = request.headers.get('Authorization')
        if auth_header:
            parts = auth_header.split()
            if len(parts) == 2 and parts[0].lower() == 'bearer':
                return parts[1]
            logger.info('Auth header malformed')
            return None
        token: Optional[str] = request.cookies.get(self.cookie_name)
        return token or None


def init_app(app: Flask, resolver: Optional[IdentityResolver] = None) -> None:
    """Attach an :class:`IdentityResolver` to the application."""
    if resolver is None:
        resolver = IdentityResolver(app.config['JWT_SECRET'],
                                    app.config['AUTH_SESSION_COOKIE_NAME'])
    app.extensions[EXTENSION_KEY] = resolver


def current_resolver() -> IdentityResolver:
    """Get the resolver registered on the current application."""
    resolver: IdentityResolver = current_app.extensions[EXTENSION_KEY]
    return resolver
