import os
import sys
import pytest

# Ensure the backend root (containing the `squares` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from squares import create_app, db, socketio

ADMIN_EMAIL = 'commish@example.com'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    ADMIN_EMAIL = ADMIN_EMAIL
    ROW_TEAM = 'chiefs'
    COL_TEAM = 'eagles'
    # Cheap hashes keep the suite fast
    PASSWORD_HASH_METHOD = 'pbkdf2:sha256:1000'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import squares.models  # noqa: F401
        db.create_all()
    # HTTP tests run without an outer app context so each request gets its own `g`
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def pool(flask_app):
    """The app's pool, with an app context pushed for direct service calls."""
    with flask_app.app_context():
        yield flask_app.extensions['squares_pool']


@pytest.fixture()
def worker_pair(tmp_path):
    """Two apps sharing one database file, like two server processes."""
    class SharedConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'pool.db'}"

    workers = (create_app(SharedConfig), create_app(SharedConfig))
    with workers[0].app_context():
        db.create_all()
    yield workers
    with workers[0].app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


def sign_up(client, email, display_name, password='password'):
    res = client.post('/register', json={'email': email, 'display_name': display_name, 'password': password})
    assert res.status_code == 201, res.get_json()
    return res.get_json()['identity']


@pytest.fixture()
def admin_client(flask_app):
    c = flask_app.test_client()
    sign_up(c, ADMIN_EMAIL, 'Pat Commissioner')
    return c


@pytest.fixture()
def alice_client(flask_app):
    c = flask_app.test_client()
    sign_up(c, 'alice@example.com', 'Alice Smith')
    return c


@pytest.fixture()
def bob_client(flask_app):
    c = flask_app.test_client()
    sign_up(c, 'bob@example.com', 'Bob Jones')
    return c
