"""
QA monitor accounts service.

The accounts service is a Flask application that owns the user credentials of
the QA monitor. It provides a small JSON API for creating accounts, logging in
and out, and changing passwords, and it is the primary repository for user
records: name, e-mail address, role, active status, and a one-way hash of the
password.

Context
-------
New testers are registered in two steps. A registration step stages the
tester's name, e-mail, role and a provisional (default) password on the
client. On the following password-setup step the tester re-enters the
provisional password and chooses a new one; only then is the account created,
with the new password. Existing users change their password through the same
form, after which they must log in again.

Callers identify themselves with a bearer token (an HS256 JWT issued at
login), sent either in the ``Authorization`` header or in the auth cookie set
by the login endpoint. The :mod:`.services.tokens` module resolves a request
to a user ID; everything downstream only sees that ID.

The :mod:`.client` package provides a Python client for the API and the
password form controller used by the password-setup and change-password
views.
"""
