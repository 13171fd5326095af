from datetime import date, datetime, time, timedelta
from typing import Tuple

import pytz
from flask import current_app


def local_now() -> datetime:
    """Current wall-clock time in the service zone, as a naive datetime.

    All game timestamps are stored naive in ``SIGNUP_TIMEZONE`` so that the
    Sunday-to-Saturday window lines up with the players' calendar.
    """
    tz = pytz.timezone(current_app.config.get('SIGNUP_TIMEZONE', 'UTC'))
    return datetime.now(tz).replace(tzinfo=None)


def days_since_sunday(moment: datetime) -> int:
    # datetime.weekday() is Monday=0 .. Sunday=6
    return (moment.weekday() + 1) % 7


def week_start(moment: datetime) -> date:
    return (moment - timedelta(days=days_since_sunday(moment))).date()


def week_window(moment: datetime) -> Tuple[datetime, datetime]:
    """Return ``(Sunday 00:00:00.000, Saturday 23:59:59.999)`` around ``moment``."""
    start = datetime.combine(week_start(moment), time.min)
    end = start + timedelta(days=6, hours=23, minutes=59, seconds=59, milliseconds=999)
    return start, end


def upcoming_game_date(moment: datetime, hour: int = 14, minute: int = 0) -> datetime:
    """Saturday of ``moment``'s week at ``hour:minute``; today when it is Saturday."""
    delta = 6 - days_since_sunday(moment)
    saturday = moment.date() + timedelta(days=delta)
    return datetime.combine(saturday, time(hour, minute))
