"""Client-side tools: the API client and the password form controller."""

from .api import AccountsClient, APIError
from .password_form import FormState, PasswordForm, Redirect

__all__ = ['AccountsClient', 'APIError', 'FormState', 'PasswordForm',
           'Redirect']
