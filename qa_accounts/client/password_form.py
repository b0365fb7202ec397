"""
Controller for the password form.

The same form serves two flows:

* **registration**: the second step of sign-up. The staged
  :class:`.RegistrationData` from the first step is passed in explicitly. The
  user re-enters the provisional password they were given and picks a new
  one; the account is then created with the new password.
* **change**: an authenticated user changes their password, and is logged
  out afterwards so that they sign in again with the new one.

The form moves through ``IDLE -> VALIDATING -> SUBMITTING`` and ends in
``SUCCESS``, ``FIELD_ERROR`` or ``GENERAL_ERROR``. Navigation is left to the
caller: a successful :meth:`PasswordForm.submit` returns a :class:`Redirect`
to the login view, to be followed after :attr:`Redirect.delay` seconds.
"""

import logging
from enum import Enum
from typing import Dict, NamedTuple, Optional
from urllib.parse import urlencode

import requests

from .. import domain
from .api import AccountsClient, APIError

logger = logging.getLogger(__name__)

OLD_PASSWORD = 'oldPassword'
NEW_PASSWORD = 'newPassword'
FIELDS = (OLD_PASSWORD, NEW_PASSWORD)
GENERAL = 'general'

REGISTRATION = 'registration'
CHANGE = 'change'

ACCOUNT_CREATED = 'Account created successfully! Please login with your new password.'
PASSWORD_CHANGED = 'Password changed successfully. Please login with your new password.'


class FormState(Enum):
    """Where the form is in its lifecycle."""

    IDLE = 'idle'
    VALIDATING = 'validating'
    SUBMITTING = 'submitting'
    SUCCESS = 'success'
    FIELD_ERROR = 'field-error'
    GENERAL_ERROR = 'general-error'


class Redirect(NamedTuple):
    """Where to send the user next, and how long to wait first."""

    location: str
    delay: float = 0.0


class PasswordForm(object):
    """Old/new password form for account setup and password change."""

    def __init__(self, client: AccountsClient,
                 registration: Optional[domain.RegistrationData] = None,
                 login_url: str = '/login',
                 redirect_delay: float = 2.0) -> None:
        self.client = client
        self.registration = registration
        self.mode = REGISTRATION if registration is not None else CHANGE
        self.login_url = login_url
        self.redirect_delay = redirect_delay
        self.values: Dict[str, str] = {OLD_PASSWORD: '', NEW_PASSWORD: ''}
        self.errors: Dict[str, str] = {}
        self.state = FormState.IDLE

    def entry_redirect(self) -> Optional[Redirect]:
        """Users who are neither registering nor logged in must log in."""
        if self.mode == CHANGE and not self.client.is_authenticated:
            return Redirect(self.login_url)
        return None

    def validate_field(self, name: str, value: str) -> Optional[str]:
        """Get the error message for a field value, if it is not valid."""
        if name == OLD_PASSWORD:
            if not value:
                if self.mode == REGISTRATION:
                    return 'Default password is required'
                return 'Current password is required'
            return None
        if name == NEW_PASSWORD:
            if not value:
                return 'New password is required'
            if len(value) < domain.MIN_PASSWORD_LENGTH:
                return (f'New password must be at least'
                        f' {domain.MIN_PASSWORD_LENGTH} characters long')
            if value == self.values[OLD_PASSWORD]:
                if self.mode == REGISTRATION:
                    return ('New password must be different from the default'
                            ' password')
                return 'New password must be different from current password'
            return None
        raise KeyError(f'No such field: {name}')

    def set_value(self, name: str, value: str) -> None:
        """Update a field. Clears that field's error and any general error."""
        if name not in self.values:
            raise KeyError(f'No such field: {name}')
        self.values[name] = value
        self.errors.pop(name, None)
        self.errors.pop(GENERAL, None)
        if self.state is not FormState.SUBMITTING and not self.errors:
            self.state = FormState.IDLE

    def blur(self, name: str) -> Optional[str]:
        """Validate a field when it loses focus."""
        self.state = FormState.VALIDATING
        error = self.validate_field(name, self.values[name])
        if error:
            self.errors[name] = error
        else:
            self.errors.pop(name, None)
        self.state = self._error_state()
        return error

    def validate(self) -> bool:
        """Validate all fields; the form can only be submitted if this passes."""
        self.state = FormState.VALIDATING
        self.errors = {}
        for name in FIELDS:
            error = self.validate_field(name, self.values[name])
            if error:
                self.errors[name] = error
        if self.errors:
            self.state = FormState.FIELD_ERROR
            return False
        return True

    def submit(self) -> Optional[Redirect]:
        """
        Validate and submit the form.

        Returns a :class:`Redirect` on success, otherwise ``None`` with the
        problem recorded in :attr:`errors`.
        """
        if self.state is FormState.SUBMITTING:
            return None
        if not self.validate():
            return None

        self.state = FormState.SUBMITTING
        try:
            if self.mode == REGISTRATION:
                return self._create_account()
            return self._change_password()
        except APIError as e:
            self._fail(e.message, e.field)
        except requests.RequestException as e:
            logger.debug('Request failed: %s', e)
            self._fail('Failed to process request')
        return None

    def _create_account(self) -> Optional[Redirect]:
        registration = self.registration
        if registration is None:
            self._fail('Registration data is no longer available')
            return None
        if self.values[OLD_PASSWORD] != registration.password:
            self._fail('Default password is incorrect', OLD_PASSWORD)
            return None

        self.client.create_account(
            registration.name,
            registration.email,
            self.values[OLD_PASSWORD],
            self.values[NEW_PASSWORD],
            role=registration.role
        )
        # The staged payload is single-use.
        self.registration = None
        self.state = FormState.SUCCESS
        return self._login_redirect(ACCOUNT_CREATED)

    def _change_password(self) -> Optional[Redirect]:
        self.client.change_password(self.values[OLD_PASSWORD],
                                    self.values[NEW_PASSWORD])
        self.values = {OLD_PASSWORD: '', NEW_PASSWORD: ''}
        self.client.logout()
        self.state = FormState.SUCCESS
        return self._login_redirect(PASSWORD_CHANGED)

    def _login_redirect(self, message: str) -> Redirect:
        location = f'{self.login_url}?{urlencode({"message": message})}'
        return Redirect(location, self.redirect_delay)

    def _error_state(self) -> FormState:
        if set(self.errors) & set(FIELDS):
            return FormState.FIELD_ERROR
        if GENERAL in self.errors:
            return FormState.GENERAL_ERROR
        return FormState.IDLE

    def _fail(self, message: str, field: Optional[str] = None) -> None:
        if field in FIELDS:
            self.errors = {field: message}
            self.state = FormState.FIELD_ERROR
        else:
            self.errors = {GENERAL: message}
            self.state = FormState.GENERAL_ERROR
