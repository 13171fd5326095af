from datetime import datetime
from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError

from signup import db
from signup.exceptions import AlreadyRegistered, RegistrationClosed
from signup.models import PlayerRegistration, User
from signup.services.persistence import commit
from .clock import local_now
from .lifecycle import get_game


def _find(user_id: str, game_id: int) -> Optional[PlayerRegistration]:
    return PlayerRegistration.query.filter_by(user_id=user_id, game_id=game_id).first()


def _ensure_open(game) -> None:
    if game.is_frozen:
        game_id = game.id
        # Release the row lock taken by get_game
        db.session.rollback()
        raise RegistrationClosed(
            'Registration is closed for this week',
            details={'game_id': game_id},
        )


def register(user_id: str, game_id: int, now: Optional[datetime] = None) -> PlayerRegistration:
    """Sign a user up for a game.

    Raises ``NotFound`` for an unknown game, ``RegistrationClosed`` when the
    game is frozen and ``AlreadyRegistered`` for a repeat signup, including
    one that loses a race against the ``(user_id, game_id)`` constraint.
    """
    game = get_game(game_id, lock=True)
    _ensure_open(game)
    if _find(user_id, game_id):
        db.session.rollback()
        raise AlreadyRegistered(
            'You are already registered for this game',
            details={'game_id': game_id},
        )

    registration = PlayerRegistration(
        user_id=user_id,
        game_id=game_id,
        registered_at=now or local_now(),
    )
    db.session.add(registration)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info(f"[register-race] user={user_id} game={game_id} duplicate rejected")
        raise AlreadyRegistered(
            'You are already registered for this game',
            details={'game_id': game_id},
        )
    current_app.logger.info(f"[register] user={user_id} game={game_id}")
    return registration


def unregister(user_id: str, game_id: int) -> bool:
    """Remove a user's signup. Returns False when there was nothing to remove."""
    game = get_game(game_id, lock=True)
    _ensure_open(game)
    registration = _find(user_id, game_id)
    if registration is None:
        db.session.rollback()
        return False
    db.session.delete(registration)
    commit('unregister', user=user_id, game=game_id)
    current_app.logger.info(f"[unregister] user={user_id} game={game_id}")
    return True


def is_registered(user_id: str, game_id: int) -> bool:
    return _find(user_id, game_id) is not None


def list_registrations(game_id: int) -> List[Tuple[PlayerRegistration, User]]:
    """Registrations for a game with their users, most recent first."""
    return (
        db.session.query(PlayerRegistration, User)
        .join(User, PlayerRegistration.user_id == User.id)
        .filter(PlayerRegistration.game_id == game_id)
        .order_by(PlayerRegistration.registered_at.desc(), PlayerRegistration.id.desc())
        .all()
    )
