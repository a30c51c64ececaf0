"""
Shared pytest fixtures for the SmartExpense test suite.

All tests run against an in-memory SQLite database (TestingConfig).
A single app context is pushed for the whole session so that SQLAlchemy
objects remain attached throughout.  After each test, clean_db wipes all
rows so tests are fully independent.

Service tests patch utils.db_helpers.get_user_id so that user_query() works
without an active HTTP request / logged-in user.  API tests log in through
/api/auth/login with the Flask test client.
"""
import pytest
from flask import g
from flask.testing import FlaskClient

from app import create_app
from extensions import db as _db


PASSWORD = 'TestPass1!'


class FreshLoginClient(FlaskClient):
    """Test client that re-reads the logged-in user from each request's cookie.

    Flask-Login caches the user on ``g``, which lives on the app context;
    the session-wide app context would otherwise carry one request's user
    into the next.
    """

    def open(self, *args, **kwargs):
        g.pop('_login_user', None)
        return super().open(*args, **kwargs)


# ---------------------------------------------------------------------------
# Application / database lifecycle
# ---------------------------------------------------------------------------

@pytest.fixture(scope='session')
def app():
    """Create a test Flask application with an in-memory SQLite database."""
    application = create_app('testing')
    application.test_client_class = FreshLoginClient
    ctx = application.app_context()
    ctx.push()
    _db.create_all()
    yield application
    _db.session.remove()
    _db.drop_all()
    ctx.pop()


@pytest.fixture(autouse=True)
def clean_db(app):
    """Wipe every table after each test so tests never share state."""
    yield
    g.pop('_login_user', None)
    _db.session.rollback()
    for table in reversed(_db.metadata.sorted_tables):
        _db.session.execute(table.delete())
    _db.session.commit()
    _db.session.expunge_all()


# ---------------------------------------------------------------------------
# Common model helpers
# ---------------------------------------------------------------------------

def make_user(email='alice@smartexpense.app', name='Alice', seed_types=True):
    from models.users import User
    from services.type_service import TypeService

    u = User(email=email, name=name)
    u.set_password(PASSWORD)
    _db.session.add(u)
    _db.session.flush()
    if seed_types:
        TypeService.seed_default_types(u.id)
    _db.session.commit()
    return u


@pytest.fixture
def user(app):
    return make_user()


@pytest.fixture
def other_user(app):
    return make_user(email='bob@smartexpense.app', name='Bob')


@pytest.fixture
def patch_user(monkeypatch):
    """Return a helper that re-patches get_user_id within a test."""
    def _set(user_id):
        monkeypatch.setattr('utils.db_helpers.get_user_id', lambda: user_id)
    return _set


@pytest.fixture
def as_user(user, patch_user):
    """Run service calls as the default test user."""
    patch_user(user.id)
    return user


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email='alice@smartexpense.app', password=PASSWORD):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


@pytest.fixture
def auth_client(client, user):
    """Test client with the default test user logged in."""
    response = login(client)
    assert response.status_code == 200, response.get_json()
    return client
