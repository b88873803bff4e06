"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database and storage bucket, not the
development ones.
"""

import os
import shutil
import pytest
import tempfile

# Set test paths BEFORE importing app
# This ensures all tests use an isolated database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'campus_reservations_test.db')
TEST_STORAGE_ROOT = os.path.join(tempfile.gettempdir(), 'campus_reservations_test_storage')
os.environ['DATABASE_PATH'] = TEST_DB_PATH
os.environ['STORAGE_ROOT'] = TEST_STORAGE_ROOT

USER_EMAIL = 'student@campus.edu'
USER_PASSWORD = 'student123'
ADMIN_EMAIL = 'admin@campus.edu'
ADMIN_PASSWORD = 'admin123'


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    os.environ['DATABASE_PATH'] = TEST_DB_PATH
    os.environ['STORAGE_ROOT'] = TEST_STORAGE_ROOT
    os.environ['FLASK_ENV'] = 'test'

    yield

    # Cleanup: remove test database and bucket after all tests
    for path in (TEST_DB_PATH, TEST_DB_PATH + '-wal', TEST_DB_PATH + '-shm'):
        if os.path.exists(path):
            try:
                os.remove(path)
            except PermissionError:
                pass  # Windows may have file locked
    shutil.rmtree(TEST_STORAGE_ROOT, ignore_errors=True)


@pytest.fixture
def app():
    """Create test application with a freshly initialized database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = TEST_DB_PATH
    app.config['STORAGE_ROOT'] = TEST_STORAGE_ROOT

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def registered_user(app):
    """A 'user' role account; returns its id."""
    from models.auth_account import create_account
    from models.profile import create_profile

    with app.app_context():
        account = create_account(USER_EMAIL, USER_PASSWORD)
        create_profile(account['id'], 'Student One')
    return account['id']


@pytest.fixture
def user_client(app, registered_user):
    """Test client signed in as a regular user."""
    client = app.test_client()
    response = client.post('/login', json={'email': USER_EMAIL, 'password': USER_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(app):
    """Test client signed in as the seeded administrator."""
    client = app.test_client()
    response = client.post('/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def facility_id(app):
    """Id of the seeded 'Main Auditorium' facility."""
    from database import get_db

    with app.app_context():
        row = get_db().execute(
            "SELECT id FROM facilities WHERE name = 'Main Auditorium'"
        ).fetchone()
    return row['id']


@pytest.fixture
def feed(app):
    """The application's change feed."""
    return app.extensions['realtime']['feed']
