"""
Provides forms for account creation, login, and password change.

Field names match the keys of the JSON API, so the name of a field with an
error can be reported back to the client as-is.
"""

from typing import Any, Optional

import email_validator
from wtforms import Form, PasswordField, StringField
from wtforms.validators import AnyOf, DataRequired, InputRequired, \
    Length, Optional as OptionalField, ValidationError

from .. import domain


def _strip(value: Optional[str]) -> Optional[str]:
    return value.strip() if isinstance(value, str) else value


def _check_bcrypt_limit(field: Any) -> None:
    if field.data and domain.password_too_long(field.data):
        raise ValidationError(
            f'New password must be at most {domain.MAX_PASSWORD_BYTES}'
            ' bytes long'
        )


NEW_PASSWORD_LENGTH = Length(
    min=domain.MIN_PASSWORD_LENGTH,
    message=f'New password must be at least {domain.MIN_PASSWORD_LENGTH}'
            ' characters long'
)


class CreateAccountForm(Form):
    """Account creation for a user who was given a default password."""

    name = StringField('Name', filters=[_strip], validators=[
        DataRequired(message='Name is required'),
        Length(max=100, message='Name must be at most 100 characters long')
    ])
    email = StringField('Email address', filters=[_strip], validators=[
        DataRequired(message='Email is required'),
        Length(max=255, message='Email must be at most 255 characters long')
    ])
    oldPassword = PasswordField('Default password', validators=[
        InputRequired(message='Default password is required')
    ])
    newPassword = PasswordField('New password', validators=[
        InputRequired(message='New password is required'),
        NEW_PASSWORD_LENGTH
    ])
    role = StringField('Role', filters=[_strip], validators=[
        OptionalField(),
        AnyOf(domain.ROLES,
              message=f'Role must be one of: {", ".join(domain.ROLES)}')
    ])

    def validate_email(self, field: StringField) -> None:
        """Syntax only. Internal and special-use domains are fine."""
        if not field.data:
            return
        try:
            email_validator.validate_email(
                field.data, check_deliverability=False,
                globally_deliverable=False
            )
        except email_validator.EmailNotValidError as e:
            raise ValidationError('Email address is not valid') from e

    def validate_newPassword(self, field: PasswordField) -> None:
        """The new password must be hashable, and differ from the old one."""
        _check_bcrypt_limit(field)
        if field.data == self.oldPassword.data:
            raise ValidationError(
                'New password must be different from the old password'
            )


class ChangePasswordForm(Form):
    """Password change for an authenticated user."""

    oldPassword = PasswordField('Current password', validators=[
        InputRequired(message='Old password and new password are required')
    ])
    newPassword = PasswordField('New password', validators=[
        InputRequired(message='Old password and new password are required'),
        NEW_PASSWORD_LENGTH
    ])

    def validate_newPassword(self, field: PasswordField) -> None:
        """Make sure the new password can be hashed."""
        _check_bcrypt_limit(field)


class LoginForm(Form):
    """Log in form."""

    email = StringField('Email address', filters=[_strip], validators=[
        InputRequired(message='Email and password are required')
    ])
    password = PasswordField('Password', validators=[
        InputRequired(message='Email and password are required')
    ])
