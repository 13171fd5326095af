from datetime import datetime, timedelta
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from signup import db
from signup.exceptions import NotFound, PersistenceFailure
from signup.models import WeeklyGame
from signup.services.persistence import commit
from .clock import local_now, upcoming_game_date, week_start, week_window


def get_current_week_game(now: Optional[datetime] = None) -> Optional[WeeklyGame]:
    """Return the game dated inside the current Sunday-Saturday window, if any.

    Read-only: the scheduler and admission checks rely on this never
    creating a game as a side effect.
    """
    now = now or local_now()
    start, end = week_window(now)
    return (
        WeeklyGame.query
        .filter(WeeklyGame.game_date >= start, WeeklyGame.game_date <= end)
        .order_by(WeeklyGame.game_date.desc())
        .first()
    )


def ensure_current_week_game(now: Optional[datetime] = None) -> WeeklyGame:
    """Get this week's game, creating it for Saturday if it does not exist yet.

    Concurrent creators collide on the unique ``week_start`` column; the
    loser rolls back and returns the winner's row.
    """
    now = now or local_now()
    game = get_current_week_game(now)
    if game:
        return game

    cfg = current_app.config
    game = WeeklyGame(
        game_date=upcoming_game_date(now, int(cfg.get('GAME_HOUR', 14)), int(cfg.get('GAME_MINUTE', 0))),
        week_start=week_start(now),
        is_frozen=False,
    )
    db.session.add(game)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info(f"[game-create-race] week={week_start(now)} lost race, reading winner")
        game = get_current_week_game(now)
        if game is None:
            raise PersistenceFailure()
        return game
    current_app.logger.info(f"[game-create] game={game.id} date={game.game_date.isoformat()}")
    return game


def get_game(game_id: int, lock: bool = False) -> WeeklyGame:
    """Load a game; ``lock`` re-reads it with a row lock held until commit.

    Admission and freeze both lock so a freeze cannot commit between an
    open-check and the registration write.
    """
    if lock:
        game = db.session.get(WeeklyGame, game_id, with_for_update=True, populate_existing=True)
    else:
        game = db.session.get(WeeklyGame, game_id)
    if game is None:
        raise NotFound(f"Game {game_id} not found", details={'game_id': game_id})
    return game


def freeze(game_id: int) -> WeeklyGame:
    """Close registration for a game. One way; freezing twice is a no-op."""
    game = get_game(game_id, lock=True)
    if game.is_frozen:
        db.session.rollback()
        return game
    game.is_frozen = True
    db.session.add(game)
    commit('freeze', game=game_id)
    current_app.logger.info(f"[freeze] game={game_id} registration closed")
    return game


def purge_expired(now: Optional[datetime] = None) -> int:
    """Delete games dated more than ``RETENTION_DAYS`` ago, with their registrations.

    A game exactly at the cutoff is kept; the next run removes it.
    Returns the number of games deleted.
    """
    now = now or local_now()
    cutoff = now - timedelta(days=int(current_app.config.get('RETENTION_DAYS', 7)))
    expired = WeeklyGame.query.filter(WeeklyGame.game_date < cutoff).all()
    for game in expired:
        # ORM delete so the registrations cascade on every backend
        db.session.delete(game)
    if expired:
        commit('purge', cutoff=cutoff.isoformat())
    current_app.logger.info(f"[purge] cutoff={cutoff.isoformat()} removed={len(expired)}")
    return len(expired)
