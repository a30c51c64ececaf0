import os
import logging
import click
from logging.handlers import RotatingFileHandler
from flask import Flask
from flask_wtf.csrf import CSRFError
from werkzeug.exceptions import HTTPException
from config import config
from extensions import db, migrate, login_manager, csrf, limiter


def configure_logging(app):
    """Configure application logging"""
    if not app.debug and not app.testing:
        # Create logs directory if it doesn't exist
        if not os.path.exists('logs'):
            os.mkdir('logs')

        # File handler for errors
        file_handler = RotatingFileHandler(
            'logs/smartexpense.log',
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('SmartExpense startup')
    else:
        # Development logging to console
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('SmartExpense startup (DEBUG mode)')


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # Configure logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Add security headers
    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        headers = app.config.get('SECURITY_HEADERS', {})
        for header, value in headers.items():
            response.headers[header] = value
        return response

    # User loader callback for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        from models.users import User
        return db.session.get(User, int(user_id))

    # API clients get a 401 instead of a redirect to a login page
    @login_manager.unauthorized_handler
    def unauthorized():
        from utils.api import error_response
        return error_response('Unauthorized', 401)

    # Import models to ensure they're registered with SQLAlchemy
    with app.app_context():
        import models

    # Register blueprints
    from blueprints.auth import auth_bp
    from blueprints.dashboard import dashboard_bp
    from blueprints.expenses import expenses_bp
    from blueprints.emis import emis_bp
    from blueprints.recurring import recurring_bp
    from blueprints.paid_marks import paid_marks_bp
    from blueprints.khata import khata_bp
    from blueprints.types import types_bp
    from blueprints.budgets import budgets_bp
    from blueprints.reports import reports_bp
    from blueprints.settings import settings_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(emis_bp)
    app.register_blueprint(recurring_bp)
    app.register_blueprint(paid_marks_bp)
    app.register_blueprint(khata_bp)
    app.register_blueprint(types_bp)
    app.register_blueprint(budgets_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(settings_bp)

    # ── Auto-set user_id on every new record ───────────────────────────────
    from sqlalchemy import event as _sa_event

    @_sa_event.listens_for(db.session, 'before_flush')
    def _auto_user_id(session, flush_context, instances):
        """Stamp user_id on any new record that has the column but no value,
        using the currently logged-in user."""
        try:
            from flask_login import current_user
            if current_user and current_user.is_authenticated:
                uid = current_user.id
                for obj in session.new:
                    if hasattr(obj, 'user_id') and obj.user_id is None:
                        obj.user_id = uid
        except RuntimeError:
            pass  # outside request context (e.g. db.create_all() at startup)

    # Create database tables
    with app.app_context():
        db.create_all()

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_commands(app)

    return app


def register_error_handlers(app):
    """Register global error handlers; every error leaves as the JSON envelope"""
    from services.exceptions import SmartExpenseError
    from utils.api import error_response

    @app.errorhandler(SmartExpenseError)
    def service_error(error):
        if error.status_code >= 500:
            app.logger.error(f'{type(error).__name__}: {error.message}')
        return error_response(error.message, error.status_code)

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        app.logger.warning(f'CSRF validation failed: {error.description}')
        return error_response('CSRF token validation failed. Please try again.', 400)

    @app.errorhandler(429)
    def rate_limited(error):
        return error_response('Too many requests. Please slow down.', 429)

    @app.errorhandler(404)
    def not_found_error(error):
        return error_response('Not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal Server Error: {error}')
        return error_response('Internal server error', 500)

    @app.errorhandler(Exception)
    def unhandled_exception(error):
        if isinstance(error, HTTPException):
            return error_response(error.description, error.code)
        db.session.rollback()
        app.logger.exception(f'Unhandled exception: {error}')
        return error_response('Internal server error', 500)


def register_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('seed-types')
    def seed_types():
        """Give every user without types the default expense and EMI types."""
        from models.users import User
        from services.type_service import TypeService

        users = User.query.order_by(User.id).all()
        seeded = 0
        for user in users:
            expense_count, emi_count = TypeService.seed_default_types(user.id)
            if expense_count or emi_count:
                seeded += 1
                click.echo(f'{user.email}: {expense_count} expense type(s), {emi_count} EMI type(s)')
        db.session.commit()
        click.echo(f'SUCCESS: seeded default types for {seeded} of {len(users)} user(s).')

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        from init_db import init_database
        init_database()
        click.echo('SUCCESS: database tables created.')


if __name__ == '__main__':
    app = create_app()
    # SECURITY: Only bind to localhost in development
    # Never use 0.0.0.0 with debug mode - it exposes the debugger to the network
    app.run(host='127.0.0.1', port=5000, debug=True)
