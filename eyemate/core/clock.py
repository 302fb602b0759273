"""
Wall-clock helpers for the configured local timezone
"""
from datetime import datetime
from typing import Callable

import pytz

from eyemate.core.config import get_settings

Clock = Callable[[], datetime]


def local_timezone():
    return pytz.timezone(get_settings().TIMEZONE)


def local_now() -> datetime:
    """
    Current local wall-clock time as a naive datetime.

    Dates and times are stored naive in local time, so every comparison
    made by the scheduler uses this value.
    """
    return datetime.now(local_timezone()).replace(tzinfo=None)


def fixed_clock(moment: datetime) -> Clock:
    """Clock that always returns ``moment``"""
    return lambda: moment
