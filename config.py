import os
from datetime import timedelta


class Config:
    """Base configuration"""

    # Signs the Flask-Login session cookie
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(os.path.abspath(os.path.dirname(__file__)), 'instance', 'smartexpense.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # CSRF Protection (JSON clients send the token in the X-CSRFToken header)
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None

    # Rate Limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = 'memory://'
    RATELIMIT_STRATEGY = 'fixed-window'
    RATELIMIT_HEADERS_ENABLED = True

    # Security Headers
    SECURITY_HEADERS = {
        'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'SAMEORIGIN',
        'Referrer-Policy': 'strict-origin-when-cross-origin'
    }

    # Password Requirements
    PASSWORD_MIN_LENGTH = 8

    # Login Security
    MAX_LOGIN_ATTEMPTS = 5
    LOCKOUT_DURATION = timedelta(minutes=15)

    # Defaults for new users
    DEFAULT_CURRENCY = 'INR'

    # Expense list pagination
    EXPENSES_PER_PAGE = 20
    EXPENSES_MAX_PER_PAGE = 100

    # Reminder windows (days)
    MARK_PAID_WINDOW_DAYS = 7
    BORROW_REMINDER_GRACE_DAYS = 7
    COLLECT_REMINDER_DAYS = 7

    # Category budgets are flagged once spending reaches this share of the limit
    BUDGET_ALERT_PERCENT = 80

    # Report ranges (months, including the current one)
    TREND_MONTHS = 6
    EMI_SUMMARY_MONTHS = 12

    @classmethod
    def init_app(cls, app):
        pass


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    """Deployed behind HTTPS with SECRET_KEY and DATABASE_URL in the environment"""
    DEBUG = False

    SECRET_KEY = os.environ.get('SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')
    # Long-lived server connections to Postgres can go stale
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True, 'pool_recycle': 300}

    SESSION_COOKIE_SECURE = True
    PREFERRED_URL_SCHEME = 'https'

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)

        if not app.config.get('SECRET_KEY'):
            raise ValueError('SECRET_KEY must be set for the production config')

        if 'sqlite' in (app.config.get('SQLALCHEMY_DATABASE_URI') or ''):
            app.logger.warning('SQLite is meant for local use; point DATABASE_URL at Postgres')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
