import os
import sys
from datetime import datetime

import pytest

# Ensure the backend root (containing the `signup` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from signup import create_app, db, socketio


# Week of Sunday 2026-10-18 .. Saturday 2026-10-24
SUNDAY = datetime(2026, 10, 18, 9, 0)
WEDNESDAY = datetime(2026, 10, 21, 12, 0)
THURSDAY = datetime(2026, 10, 22, 18, 30)
FRIDAY = datetime(2026, 10, 23, 20, 0)
SATURDAY_MORNING = datetime(2026, 10, 24, 10, 0)


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WTF_CSRF_ENABLED = False
    SIGNUP_TIMEZONE = 'UTC'
    GAME_HOUR = 14
    GAME_MINUTE = 0
    RETENTION_DAYS = 7
    FREEZE_SCHEDULE = '5 23 59'
    CLEANUP_SCHEDULE = '0 0 0'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import signup.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app, client):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=client,
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def frozen_clock(monkeypatch):
    """Pin the service clock; returns a setter for moving it."""
    from signup.services.games import admission, lifecycle

    current = {'now': WEDNESDAY}

    def _now():
        return current['now']

    monkeypatch.setattr(lifecycle, 'local_now', _now)
    monkeypatch.setattr(admission, 'local_now', _now)

    def set_now(value):
        current['now'] = value

    return set_now


@pytest.fixture()
def login(client):
    def _login(sub='user-1', **profile):
        from signup.services.identity import issue_identity_token
        claims = {'sub': sub}
        claims.update(profile)
        res = client.post('/api/login', json={'token': issue_identity_token(claims)})
        assert res.status_code == 200
        return res.get_json()['user']
    return _login


def make_user(user_id='user-1', **fields):
    from signup.models import User
    user = User(id=user_id, **fields)
    db.session.add(user)
    db.session.commit()
    return user


def make_game(game_date, is_frozen=False):
    from signup.models import WeeklyGame
    from signup.services.games.clock import week_start
    game = WeeklyGame(game_date=game_date, week_start=week_start(game_date), is_frozen=is_frozen)
    db.session.add(game)
    db.session.commit()
    return game
