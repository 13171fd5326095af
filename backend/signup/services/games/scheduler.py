import threading
from collections import namedtuple
from datetime import datetime, time, timedelta
from typing import List, Optional, Tuple

from signup import db, socketio
from .clock import days_since_sunday, local_now
from .lifecycle import freeze, get_current_week_game, purge_expired


# weekday: 0 = Sunday .. 6 = Saturday, as in cron
WeeklyTrigger = namedtuple('WeeklyTrigger', ['name', 'weekday', 'hour', 'minute'])

_stop_event = threading.Event()
_started = False


def parse_schedule(name: str, spec: str) -> WeeklyTrigger:
    """Parse a ``"weekday hour minute"`` string such as ``"5 23 59"``."""
    try:
        weekday, hour, minute = (int(part) for part in spec.split())
    except ValueError:
        raise ValueError(f"Invalid schedule for {name!r}: {spec!r} (expected 'weekday hour minute')")
    if not (0 <= weekday <= 6 and 0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Schedule for {name!r} out of range: {spec!r}")
    return WeeklyTrigger(name, weekday, hour, minute)


def load_triggers(config) -> List[WeeklyTrigger]:
    return [
        parse_schedule('freeze', config.get('FREEZE_SCHEDULE', '5 23 59')),
        parse_schedule('cleanup', config.get('CLEANUP_SCHEDULE', '0 0 0')),
    ]


def next_fire_time(trigger: WeeklyTrigger, now: datetime) -> datetime:
    """First instant strictly after ``now`` matching the trigger."""
    days_ahead = (trigger.weekday - days_since_sunday(now)) % 7
    candidate = datetime.combine(now.date() + timedelta(days=days_ahead), time(trigger.hour, trigger.minute))
    if candidate <= now:
        candidate += timedelta(days=7)
    return candidate


def next_due(triggers: List[WeeklyTrigger], now: datetime) -> Tuple[WeeklyTrigger, datetime]:
    return min(((t, next_fire_time(t, now)) for t in triggers), key=lambda pair: pair[1])


def run_freeze_tick(app) -> Optional[int]:
    """Freeze this week's game if it exists and is still open.

    Never creates a game. Returns the frozen game id, or None when there was
    nothing to do or the tick failed.
    """
    with app.app_context():
        try:
            app.logger.info('[tick-freeze] freezing current week registration')
            game = get_current_week_game()
            if not game:
                app.logger.info('[tick-freeze] no game this week')
                return None
            if game.is_frozen:
                app.logger.info(f"[tick-freeze] game={game.id} already frozen")
                return None
            freeze(game.id)
            socketio.emit('game_update', {'game_id': game.id}, to=f"game:{game.id}", namespace='/ws')
            return game.id
        except Exception as exc:
            db.session.rollback()
            app.logger.error(f"[tick-fail] trigger=freeze error={exc}", exc_info=True)
            return None


def run_cleanup_tick(app) -> Optional[int]:
    """Purge expired games. Returns the number removed, or None on failure."""
    with app.app_context():
        try:
            app.logger.info('[tick-cleanup] cleaning up old games')
            return purge_expired()
        except Exception as exc:
            db.session.rollback()
            app.logger.error(f"[tick-fail] trigger=cleanup error={exc}", exc_info=True)
            return None


TICKS = {
    'freeze': run_freeze_tick,
    'cleanup': run_cleanup_tick,
}


def start_scheduler(app) -> bool:
    """Start the weekly trigger worker once per process.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Validates the configured schedules before starting
    """
    global _started
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return False
    if _started:
        return False
    triggers = load_triggers(app.config)
    _stop_event.clear()
    _started = True
    app.logger.info(
        '[scheduler-start] ' + ' '.join(f"{t.name}={t.weekday}/{t.hour:02d}:{t.minute:02d}" for t in triggers)
    )
    socketio.start_background_task(_worker, app, triggers)
    return True


def stop_scheduler() -> None:
    global _started
    _stop_event.set()
    _started = False


def _worker(app, triggers: List[WeeklyTrigger]) -> None:
    hb = int(app.config.get('SCHEDULER_HEARTBEAT_SEC', 0) or 0)
    while not _stop_event.is_set():
        with app.app_context():
            now = local_now()
        trigger, fire_at = next_due(triggers, now)
        app.logger.info(f"[scheduler-wait] trigger={trigger.name} at={fire_at.isoformat()}")

        # Re-read the clock after each wake so early wakeups keep waiting
        while not _stop_event.is_set():
            with app.app_context():
                remaining = (fire_at - local_now()).total_seconds()
            if remaining <= 0:
                break
            step = min(hb, remaining) if hb > 0 else remaining
            _stop_event.wait(step)
            if hb > 0:
                app.logger.info(f"[scheduler-heartbeat] trigger={trigger.name} remaining={max(0, int(remaining - step))}s")
        if _stop_event.is_set():
            return
        TICKS[trigger.name](app)
