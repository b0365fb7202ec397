"""Provides the JSON API for account management."""

import logging
from datetime import timedelta

from flask import Blueprint, Response, current_app, jsonify, make_response, \
    request

from ..controllers import accounts
from ..services import tokens

logger = logging.getLogger(__name__)
blueprint = Blueprint('api', __name__, url_prefix='/api/auth')


def set_cookies(response: Response, data: dict) -> None:
    """
    Update a :class:`.Response` with cookies in controller data.

    Controllers seeking to update cookies must include a 'cookies' key
    in their response data. An empty value with no lifetime unsets the
    cookie.
    """
    cookies = data.pop('cookies', None)
    if cookies is None:
        return None
    for cookie_key, (cookie_value, expires) in cookies.items():
        cookie_name = current_app.config[f'{cookie_key.upper()}_NAME']
        max_age = timedelta(seconds=expires)
        params = dict(httponly=True, samesite='Lax',
                      domain=current_app.config.get('AUTH_SESSION_COOKIE_DOMAIN'))
        if current_app.config['AUTH_SESSION_COOKIE_SECURE']:
            params['secure'] = True
        response.set_cookie(cookie_name, cookie_value, max_age=max_age,
                            **params)


def _json_body() -> object:
    # Anything that isn't JSON is rejected by the controllers.
    return request.get_json(silent=True)


@blueprint.after_request
def apply_response_headers(response: Response) -> Response:
    """Auth responses must never be cached."""
    response.headers['Cache-Control'] = 'no-store'
    return response


@blueprint.route('/create-account', methods=['POST'])
def create_account() -> Response:
    """Create a new account with a freshly chosen password."""
    data, code, headers = accounts.create_account(_json_body())
    return make_response(jsonify(data), code, headers)


@blueprint.route('/change-password', methods=['PUT'])
def change_password() -> Response:
    """Change the password of the authenticated user."""
    user_id = tokens.current_resolver().resolve(request)
    data, code, headers = accounts.change_password(user_id, _json_body())
    return make_response(jsonify(data), code, headers)


@blueprint.route('/login', methods=['POST'])
def login() -> Response:
    """Log in with e-mail and password; sets the auth cookie."""
    data, code, headers = accounts.login(
        _json_body(),
        current_app.config['JWT_SECRET'],
        current_app.config['JWT_EXPIRES_IN']
    )
    cookies = {'cookies': data.pop('cookies', None)}
    response = make_response(jsonify(data), code, headers)
    set_cookies(response, cookies)
    return response


@blueprint.route('/logout', methods=['POST'])
def logout() -> Response:
    """Log out; unsets the auth cookie."""
    data, code, headers = accounts.logout()
    cookies = {'cookies': data.pop('cookies', None)}
    response = make_response(jsonify(data), code, headers)
    set_cookies(response, cookies)
    return response
