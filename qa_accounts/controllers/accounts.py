"""
Controllers for account creation, authentication, and password change.

Each controller takes the already-parsed request body (and, where needed, the
caller's user ID as resolved by the route) and returns a :data:`ResponseData`
tuple. Failures are raised as :mod:`qa_accounts.exceptions` errors, which the
application renders as JSON. Nothing is written to the users datastore on any
failure path.
"""

import logging
from typing import Any, Dict, NoReturn, Optional, Tuple, Type

from http import HTTPStatus as status
from werkzeug.datastructures import MultiDict
from wtforms import Form

from .. import domain
from ..exceptions import AccountsError, ConflictError, InternalError, \
    InvalidCredentials, NotFoundError, SamePasswordError, Unauthorized, \
    ValidationError
from ..services import tokens, users
from .forms import ChangePasswordForm, CreateAccountForm, LoginForm

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]


def _formdata(params: Any, form_class: Type[Form]) -> MultiDict:
    """Pick the form's fields out of a JSON body; values must be strings."""
    if not isinstance(params, dict):
        raise ValidationError('Request body must be a JSON object')
    formdata = MultiDict()
    for field in form_class():
        value = params.get(field.name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ValidationError(f'{field.name} must be a string',
                                  field=field.name)
        formdata[field.name] = value
    return formdata


def _raise_first_error(form: Form) -> NoReturn:
    for field in form:
        if field.errors:
            raise ValidationError(field.errors[0], field=field.name)
    raise ValidationError()


def create_account(params: Any) -> ResponseData:
    """
    Create a new account with the password the user has just chosen.

    Parameters
    ----------
    params : dict
        Should include ``name``, ``email``, ``oldPassword`` and
        ``newPassword``, and may include ``role``. ``oldPassword`` is the
        default password the user was given; it is not checked against
        anything stored, but the new password must differ from it.

    Returns
    -------
    dict
        Response data, including the public fields of the new user.
    int
        Status code. 200 if the account was created.
    dict
        Headers to add to the response.

    Raises
    ------
    :class:`.ValidationError`
        Missing field, or the new password violates the password policy.
    :class:`.ConflictError`
        An account with this e-mail address already exists.
    :class:`.InternalError`
        The account could not be created for any other reason.

    """
    form = CreateAccountForm(_formdata(params, CreateAccountForm))
    if not form.validate():
        logger.debug('Account creation data not valid')
        _raise_first_error(form)

    email = domain.normalize_email(form.email.data)
    try:
        if users.does_email_exist(email):
            logger.debug('Account with this email already exists')
            raise ConflictError(field='email')
        user = users.create(form.name.data, email, form.newPassword.data,
                            role=form.role.data or domain.DEFAULT_ROLE)
    except users.DuplicateEmail as e:
        # Lost a race with a concurrent registration for the same address.
        logger.debug('Email uniqueness constraint violated')
        raise ConflictError(field='email') from e
    except AccountsError:
        raise
    except Exception as e:
        logger.exception('Error creating account')
        raise InternalError('Failed to create account') from e

    logger.info('Created account %s', user.user_id)
    data = {
        'success': True,
        'data': {'user': user.to_dict()},
        'message': 'Account created successfully',
    }
    return data, status.OK, {}


def change_password(user_id: Optional[str], params: Any) -> ResponseData:
    """
    Change the password of the calling user.

    Parameters
    ----------
    user_id : str or None
        ID of the authenticated caller, or ``None`` if the request carried
        no valid credentials.
    params : dict
        Should include ``oldPassword`` and ``newPassword``.

    Returns
    -------
    dict
        Response data.
    int
        Status code. 200 if the password was changed.
    dict
        Headers to add to the response.

    """
    if not user_id:
        raise Unauthorized()

    form = ChangePasswordForm(_formdata(params, ChangePasswordForm))
    if not form.validate():
        logger.debug('Password change data not valid')
        _raise_first_error(form)

    try:
        try:
            db_user = users.get_user_by_id(user_id)
        except users.NoSuchUser as e:
            raise NotFoundError() from e

        if not db_user.is_active:
            raise Unauthorized('Account is deactivated')

        if not db_user.compare_password(form.oldPassword.data):
            logger.debug('Wrong current password for %s', user_id)
            raise InvalidCredentials(field='oldPassword')

        # The new password is compared just like a candidate old password.
        if db_user.compare_password(form.newPassword.data):
            raise SamePasswordError(field='newPassword')

        users.set_password(db_user, form.newPassword.data)
    except AccountsError:
        raise
    except Exception as e:
        logger.exception('Error changing password')
        raise InternalError('Failed to change password') from e

    logger.info('Changed password for %s', user_id)
    data = {'success': True, 'message': 'Password changed successfully'}
    return data, status.OK, {}


def login(params: Any, secret: str, expires_in: int) -> ResponseData:
    """
    Authenticate with e-mail and password, and issue a token.

    The response data includes a ``cookies`` key that the route uses to set
    the auth cookie; it must be removed before the data is sent.
    """
    form = LoginForm(_formdata(params, LoginForm))
    if not form.validate():
        logger.debug('Login data not valid')
        _raise_first_error(form)

    try:
        user = users.authenticate(form.email.data, form.password.data)
    except (users.NoSuchUser, users.PasswordAuthenticationFailed) as e:
        logger.debug('Authentication failed: %s', e)
        raise Unauthorized('Invalid email or password') from e
    except users.AccountDeactivated as e:
        raise Unauthorized('Account is deactivated') from e
    except Exception as e:
        logger.exception('Error during authentication')
        raise InternalError('Failed to log in') from e

    token = tokens.generate_token(user, secret, expires_in)
    logger.info('Issued token for %s', user.user_id)
    data: Dict[str, Any] = {
        'success': True,
        'data': {'user': user.to_dict(), 'token': token},
        'message': 'Login successful',
        'cookies': {'auth_session_cookie': (token, expires_in)},
    }
    return data, status.OK, {}


def logout() -> ResponseData:
    """Log out by expiring the auth cookie. Tokens themselves are stateless."""
    data = {
        'success': True,
        'message': 'Logged out successfully',
        'cookies': {'auth_session_cookie': ('', 0)},
    }
    return data, status.OK, {}
