"""Daily reminder state machine - pure functions over UserDailyPrefs."""

from dataclasses import replace
from datetime import datetime
from enum import Enum

from .tasks import UserDailyPrefs


class ReminderState(Enum):
    DISABLED = "disabled"
    ARMED = "armed"
    NOTIFIED_TODAY = "notified-today"


def today_string(now: datetime) -> str:
    """Calendar date used to compare reminder days (YYYY-MM-DD)."""
    return now.date().isoformat()


def reminder_state(prefs: UserDailyPrefs, today: str) -> ReminderState:
    if not prefs.enabled:
        return ReminderState.DISABLED
    if prefs.last_message_date == today:
        return ReminderState.NOTIFIED_TODAY
    return ReminderState.ARMED


def should_notify(prefs: UserDailyPrefs, today: str) -> bool:
    """True only for the first activity of the day while enabled."""
    return reminder_state(prefs, today) == ReminderState.ARMED


def mark_notified(prefs: UserDailyPrefs, today: str) -> UserDailyPrefs:
    return replace(prefs, last_message_date=today)


def enable(prefs: UserDailyPrefs) -> UserDailyPrefs:
    """Turn reminders on without touching the last reminder date."""
    return replace(prefs, enabled=True)


def disable(prefs: UserDailyPrefs) -> UserDailyPrefs:
    return replace(prefs, enabled=False)


def reset(prefs: UserDailyPrefs) -> UserDailyPrefs:
    """Re-enable and forget today's reminder so the next activity triggers again."""
    return replace(prefs, enabled=True, last_message_date="")
