"""Application factory for the accounts app."""

import logging
from typing import Any, Mapping, Optional

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

from . import app_logging
from .exceptions import InternalError
from .routes import api
from .services import tokens, users

logger = logging.getLogger(__name__)


def jsonify_exception(error: HTTPException) -> Response:
    """Render an HTTP error in the API error envelope."""
    data = {'success': False, 'error': error.description}
    field = getattr(error, 'field', None)
    if field:
        data['field'] = field
    response = jsonify(data)
    response.status_code = error.code or 500
    return response


def handle_unexpected(error: Exception) -> Response:
    """Log anything nobody else handled, and hide the details."""
    logger.exception('Unhandled exception: %s', error)
    return jsonify_exception(InternalError())


def create_web_app(config: Optional[Mapping[str, Any]] = None,
                   identity_resolver: Optional[tokens.IdentityResolver] = None
                   ) -> Flask:
    """
    Initialize and configure the accounts application.

    Parameters
    ----------
    config : dict
        Settings that override :mod:`qa_accounts.config`. Applied before any
        extension is initialized, so e.g. the database URI can be set here.
    identity_resolver : :class:`.tokens.IdentityResolver`
        Used to resolve the caller of authenticated endpoints. By default a
        resolver for the configured JWT secret and cookie name.

    """
    app = Flask('qa_accounts')
    app.config.from_pyfile('config.py')
    if config is not None:
        app.config.update(config)

    app_logging.setup_logger(app.config['LOGLEVEL'], app.config['LOG_JSON'])

    users.init_app(app)
    tokens.init_app(app, identity_resolver)

    app.register_blueprint(api.blueprint)
    app.errorhandler(HTTPException)(jsonify_exception)
    app.errorhandler(Exception)(handle_unexpected)

    if app.config['CREATE_DB']:
        with app.app_context():
            users.create_all()

    return app
