"""
Command-line helpers for the accounts service.

.. code-block:: bash

   $ DATABASE_URI=sqlite:///users.db qa-accounts create-db
   $ DATABASE_URI=sqlite:///users.db qa-accounts create-user
   Name: Jane Doe
   Email address: jane@qa.io
   Password:
   Repeat for confirmation:
   Role [tester]:
   Created user 5f0c6d6c0a3c4f5e9d2b7f3c1e8a9b10 (jane@qa.io)

   $ JWT_SECRET=foosecret qa-accounts generate-token --email jane@qa.io
   eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9...

Use the token in requests to authenticated endpoints with the header
``Authorization: Bearer [token]``. Be sure to use the same ``JWT_SECRET``
when running the app.
"""

import click

from . import domain
from .factory import create_web_app
from .services import tokens, users


@click.group()
def cli() -> None:
    """Manage QA monitor user accounts."""


@cli.command('create-db')
def create_db() -> None:
    """Create the users table."""
    app = create_web_app()
    with app.app_context():
        users.create_all()
    click.echo('Created database tables')


@cli.command('create-user')
@click.option('--name', prompt='Name')
@click.option('--email', prompt='Email address')
@click.option('--password', prompt=True, hide_input=True,
              confirmation_prompt=True)
@click.option('--role', prompt='Role', default=domain.DEFAULT_ROLE,
              type=click.Choice(domain.ROLES))
def create_user(name: str, email: str, password: str, role: str) -> None:
    """Create a new user. For dev/test purposes only."""
    if len(password) < domain.MIN_PASSWORD_LENGTH:
        raise click.BadParameter(
            f'must be at least {domain.MIN_PASSWORD_LENGTH} characters long',
            param_hint='--password'
        )
    if domain.password_too_long(password):
        raise click.BadParameter(
            f'must be at most {domain.MAX_PASSWORD_BYTES} bytes long',
            param_hint='--password'
        )
    app = create_web_app()
    with app.app_context():
        users.create_all()
        try:
            user = users.create(name, email, password, role=role)
        except users.DuplicateEmail as e:
            raise click.ClickException(str(e)) from e
    click.echo(f'Created user {user.user_id} ({user.email})')


@cli.command('generate-token')
@click.option('--email', prompt='Email address')
@click.option('--expires-in', default=None, type=int,
              help='Token lifetime in seconds.')
def generate_token(email: str, expires_in: int) -> None:
    """Print a bearer token for an existing user."""
    app = create_web_app()
    with app.app_context():
        try:
            user = users.get_user_by_email(email).to_domain()
        except users.NoSuchUser as e:
            raise click.ClickException(f'No user with email {email}') from e
    if expires_in is None:
        expires_in = app.config['JWT_EXPIRES_IN']
    click.echo(tokens.generate_token(user, app.config['JWT_SECRET'],
                                     expires_in))
