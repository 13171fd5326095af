from datetime import datetime

import pytest

from signup.exceptions import AlreadyRegistered, NotFound, RegistrationClosed
from signup.models import PlayerRegistration
from signup.services.games import admission, lifecycle

from conftest import WEDNESDAY, make_game, make_user


@pytest.fixture()
def game(flask_app):
    return make_game(datetime(2026, 10, 24, 14, 0))


def test_register_creates_registration(game):
    make_user('user-1')
    registration = admission.register('user-1', game.id, now=WEDNESDAY)
    assert registration.user_id == 'user-1'
    assert registration.game_id == game.id
    assert registration.registered_at == WEDNESDAY
    assert admission.is_registered('user-1', game.id)


def test_register_twice_is_rejected(game):
    make_user('user-1')
    admission.register('user-1', game.id)
    with pytest.raises(AlreadyRegistered):
        admission.register('user-1', game.id)
    assert PlayerRegistration.query.filter_by(user_id='user-1', game_id=game.id).count() == 1


def test_register_race_surfaces_already_registered(game, monkeypatch):
    make_user('user-1')
    admission.register('user-1', game.id)
    # The duplicate check misses a row committed by a concurrent request
    monkeypatch.setattr(admission, '_find', lambda user_id, game_id: None)
    with pytest.raises(AlreadyRegistered):
        admission.register('user-1', game.id)
    assert PlayerRegistration.query.filter_by(user_id='user-1', game_id=game.id).count() == 1


def test_register_unknown_game(flask_app):
    make_user('user-1')
    with pytest.raises(NotFound):
        admission.register('user-1', 12345)


def test_frozen_game_rejects_changes(game):
    make_user('user-1')
    make_user('user-2')
    admission.register('user-1', game.id)
    lifecycle.freeze(game.id)
    lifecycle.freeze(game.id)

    with pytest.raises(RegistrationClosed):
        admission.register('user-2', game.id)
    with pytest.raises(RegistrationClosed):
        admission.unregister('user-1', game.id)
    assert admission.is_registered('user-1', game.id)
    assert not admission.is_registered('user-2', game.id)


def test_unregister_removes_registration(game):
    make_user('user-1')
    admission.register('user-1', game.id)
    assert admission.unregister('user-1', game.id) is True
    assert not admission.is_registered('user-1', game.id)


def test_unregister_without_registration_is_noop(game):
    make_user('user-1')
    make_user('user-2')
    admission.register('user-2', game.id)
    assert admission.unregister('user-1', game.id) is False
    assert PlayerRegistration.query.filter_by(game_id=game.id).count() == 1


def test_frozen_check_uses_target_game(flask_app):
    make_user('user-1')
    last_week = make_game(datetime(2026, 10, 17, 14, 0), is_frozen=True)
    this_week = make_game(datetime(2026, 10, 24, 14, 0))
    admission.register('user-1', this_week.id)
    with pytest.raises(RegistrationClosed):
        admission.register('user-1', last_week.id)


def test_list_registrations_most_recent_first(game):
    make_user('user-1', first_name='Ann')
    make_user('user-2', first_name='Bo')
    make_user('user-3', first_name='Cy')
    admission.register('user-1', game.id, now=datetime(2026, 10, 19, 8, 0))
    admission.register('user-3', game.id, now=datetime(2026, 10, 21, 8, 0))
    admission.register('user-2', game.id, now=datetime(2026, 10, 20, 8, 0))

    rows = admission.list_registrations(game.id)
    assert [user.id for _, user in rows] == ['user-3', 'user-2', 'user-1']
    assert all(registration.game_id == game.id for registration, _ in rows)


def test_list_registrations_empty(game):
    assert admission.list_registrations(game.id) == []


def test_admission_locks_the_game_row(game, monkeypatch):
    make_user('user-1')
    seen = []
    real_get_game = admission.get_game

    def spy(game_id, lock=False):
        seen.append(lock)
        return real_get_game(game_id, lock=lock)

    monkeypatch.setattr(admission, 'get_game', spy)
    admission.register('user-1', game.id)
    admission.unregister('user-1', game.id)
    assert seen == [True, True]


def test_register_sees_freeze_committed_elsewhere(flask_app, game):
    make_user('user-1')
    game_id = game.id
    # Loaded and cached as open in this session
    assert game.is_frozen is False

    # Another session (the scheduler's) freezes the game
    with flask_app.app_context():
        lifecycle.freeze(game_id)

    with pytest.raises(RegistrationClosed):
        admission.register('user-1', game_id)
    assert PlayerRegistration.query.filter_by(game_id=game_id).count() == 0
