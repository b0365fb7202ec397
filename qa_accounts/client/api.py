"""HTTP client for the accounts API."""

import logging
from typing import Any, Dict, Optional

import requests

from .. import domain

logger = logging.getLogger(__name__)


class APIError(RuntimeError):
    """The accounts API answered with an error."""

    def __init__(self, status_code: int, message: str,
                 field: Optional[str] = None) -> None:
        super(APIError, self).__init__(message)
        self.status_code = status_code
        self.message = message
        self.field = field


class AccountsClient(object):
    """
    Talks to the ``/api/auth`` endpoints of an accounts service.

    Holds the bearer token issued at login and sends it on authenticated
    requests. Transport failures are raised as
    :class:`requests.RequestException`; error responses as
    :class:`APIError`.
    """

    def __init__(self, base_url: str,
                 session: Optional[requests.Session] = None,
                 timeout: float = 10) -> None:
        self.base_url = base_url.rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def _request(self, method: str, path: str,
                 payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        response = self.session.request(
            method, f'{self.base_url}/api/auth{path}', json=payload,
            headers=headers, timeout=self.timeout
        )
        try:
            data: Dict[str, Any] = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        if not 200 <= response.status_code < 300 or not data.get('success'):
            message = data.get('error') or 'Failed to process request'
            logger.debug('%s %s failed with %s: %s', method, path,
                         response.status_code, message)
            raise APIError(response.status_code, message, data.get('field'))
        return data

    def login(self, email: str, password: str) -> domain.User:
        """Log in and keep the issued token for later requests."""
        data = self._request('POST', '/login',
                             {'email': email, 'password': password})
        self.token = data['data']['token']
        return domain.from_dict(data['data']['user'])

    def logout(self) -> None:
        """Forget the token and expire the server-side cookie."""
        self.token = None
        self.session.cookies.clear()
        try:
            self._request('POST', '/logout')
        except (APIError, requests.RequestException) as e:
            # The token is already gone locally; that is what matters.
            logger.debug('Logout request failed: %s', e)

    def create_account(self, name: str, email: str, old_password: str,
                       new_password: str,
                       role: Optional[str] = None) -> domain.User:
        """Create an account; returns the new user's public data."""
        payload = {
            'name': name,
            'email': email,
            'oldPassword': old_password,
            'newPassword': new_password,
        }
        if role:
            payload['role'] = role
        data = self._request('POST', '/create-account', payload)
        return domain.from_dict(data['data']['user'])

    def change_password(self, old_password: str, new_password: str) -> str:
        """Change the logged-in user's password; returns the server message."""
        data = self._request('PUT', '/change-password', {
            'oldPassword': old_password,
            'newPassword': new_password,
        })
        message: str = data.get('message', '')
        return message
