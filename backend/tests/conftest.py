import os
import sys
import pytest

# Ensure the backend root (containing the `icebreaker` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from icebreaker import create_app, db


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    BCRYPT_LOG_ROUNDS = 4
    QUESTION_COUNT = 10
    MAX_SEAT_NUMBER = 12
    MAX_ROOM_PARTICIPANTS = 100
    ROOM_CODE_LENGTH = 6
    ROOM_CODE_ATTEMPTS = 20
    ROOM_MIN_EXPIRY_HOURS = 1
    ROOM_MAX_EXPIRY_HOURS = 72
    ROOM_DEFAULT_EXPIRY_HOURS = 24
    EXPIRY_SWEEP_INTERVAL_SEC = 3600


ADMIN_USERNAME = 'host'
ADMIN_PASSWORD = 'correct horse battery staple'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import icebreaker.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin(flask_app):
    from icebreaker.models import Admin
    account = Admin(username=ADMIN_USERNAME)
    account.set_password(ADMIN_PASSWORD)
    db.session.add(account)
    db.session.commit()
    return account


@pytest.fixture()
def admin_client(flask_app, admin):
    test_client = flask_app.test_client()
    res = test_client.post('/api/admin/login', json={'username': ADMIN_USERNAME, 'password': ADMIN_PASSWORD})
    assert res.status_code == 200
    return test_client


@pytest.fixture()
def room(flask_app):
    from icebreaker.services.game.rooms import create_room
    return create_room(24)


def full_sheet(mine_prefix, guess_prefix, count=10):
    return [
        {'my_answer': f'{mine_prefix}{i}', 'partner_guess': f'{guess_prefix}{i}'}
        for i in range(1, count + 1)
    ]
