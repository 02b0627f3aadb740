import os
import sys
import pytest

# Ensure project root is on sys.path for conftest imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app
from models import db as _db, User, ContentItem, utcnow


ADMIN_PASSWORD = 'Admin-Pass-2024!'
VIEWER_PASSWORD = 'Viewer-Pass-2024!'


# A fresh app with an in-memory SQLite DB per test. The app context is only
# pushed for setup, so each request gets its own context (and its own
# `current_user`), the same way it does in production.
@pytest.fixture
def app(tmp_path):
    test_config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SECRET_KEY': 'test-secret-key',
        'WTF_CSRF_ENABLED': False,  # Disable CSRF in tests
        'RATELIMIT_ENABLED': False,
        'USE_S3': False,
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'DISABLE_EMAILS': False,
    }
    app, _ = create_app(test_config=test_config)

    with app.app_context():
        _db.create_all()
        _create_user('admin', ADMIN_PASSWORD, 'Admin')
        _create_user('viewer', VIEWER_PASSWORD, 'Viewer')

    yield app

    with app.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def ctx(app):
    """Push an app context for tests that call services directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, username, password):
    return client.post('/auth/login', data={'username': username, 'password': password}, follow_redirects=False)


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    rv = login(client, 'admin', ADMIN_PASSWORD)
    assert rv.status_code == 302
    return client


@pytest.fixture
def viewer_client(app):
    client = app.test_client()
    rv = login(client, 'viewer', VIEWER_PASSWORD)
    assert rv.status_code == 302
    return client


def _create_user(username, password, role):
    user = User(username=username, email=f'{username}@example.com')
    user.set_role(role)
    user.set_password(password)
    _db.session.add(user)
    _db.session.commit()
    return user


def make_content(section, content='text', name=None, order=0, is_active=True, content_type='text',
                 subsection=None, created_at=None):
    """Insert a content row directly, bypassing the service layer."""
    now = created_at or utcnow()
    item = ContentItem(
        section=section,
        subsection=subsection,
        content_type=content_type,
        content=content,
        meta={'name': name} if name else {},
        order_index=order,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    _db.session.add(item)
    _db.session.commit()
    return item
