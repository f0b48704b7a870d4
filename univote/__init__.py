# univote/__init__.py

import atexit
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from univote.clock import SystemClock
from univote.config import get_config, validate_jwt_secret
from univote.encryption.password_hashing import PasswordHashingService
from univote.errors import VotingSystemError
from univote.extensions import db, jwt, limiter, migrate


def create_app(config=None, clock=None, **overrides):
    """
    Build the election API.

    ``config`` is a config class or one of ``development``, ``production``
    and ``testing``; keyword overrides are applied on top. ``clock`` is any
    object with a ``now()`` returning naive UTC and drives every
    time-dependent decision (status sweeps, vote admission).
    """
    app = Flask(__name__)
    if config is None or isinstance(config, str):
        config = get_config(config)
    app.config.from_object(config)
    app.config.update(overrides)

    validate_jwt_secret(app.config.get('JWT_SECRET_KEY'))
    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Behind a reverse proxy the client address comes from X-Forwarded-For
    if app.config['TRUST_PROXY']:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    app.extensions['univote_clock'] = clock or SystemClock()
    app.extensions['univote_password_hasher'] = PasswordHashingService.from_config(app.config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Model and token-loader modules must be imported before first use
    from univote.database import models  # noqa: F401
    from univote.security import token_manager  # noqa: F401
    from univote.routes import register_blueprints
    from univote.cli import register_commands

    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    with app.app_context():
        db.create_all()
        if app.config['CREATE_DEFAULT_ADMIN']:
            from univote.authentication.accounts import ensure_default_admin
            ensure_default_admin(app.config)

    if app.config['STATUS_SYNC_ENABLED']:
        from univote.elections.reconciler import StatusReconciler
        reconciler = StatusReconciler(
            app,
            clock=app.extensions['univote_clock'],
            interval=app.config['STATUS_SYNC_INTERVAL_SECONDS'],
        )
        app.extensions['univote_status_reconciler'] = reconciler
        reconciler.start()
        atexit.register(reconciler.stop)

    return app


def register_error_handlers(app):
    @app.errorhandler(VotingSystemError)
    def handle_domain_error(e):
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__}: {e.message}")
        return jsonify({'success': False, 'message': e.message}), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({'success': False, 'message': 'Route not found'}), 404

    @app.errorhandler(429)
    def handle_rate_limited(e):
        return jsonify({'success': False, 'message': e.description}), 429

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'message': e.description}), e.code
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return jsonify({'success': False, 'message': 'Internal server error'}), 500
