"""Human-readable labels for reminder descriptors.

Callers may pass a translation callback ``t(key, default_value=..., count=...)``
that returns the localized text for a fragment.  Fragments keep their order
and are joined with single spaces whether or not ``t`` is given; without it
(or for an unmapped key) the English default is used.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from date_rules import MONDAY, is_valid_weekday, normalize_date
from reminder import DAY_NAMES, DEFAULT_TIME, Reminder, SpecificDate, Timeframe
from validation import normalize_time

Translate = Optional[Callable[..., str]]
DateFormatter = Optional[Callable[[date], str]]


def format_time_for_display(time_str: str | None, use24h: bool = True) -> str:
    """Render ``HH:mm`` as ``09:00`` (24h) or ``9:00 AM`` (12h)."""
    normalized = normalize_time(time_str) or DEFAULT_TIME
    hours, minutes = (int(part) for part in normalized.split(":"))
    if use24h:
        return f"{hours:02d}:{minutes:02d}"
    h12 = hours % 12 or 12
    ampm = "AM" if hours < 12 else "PM"
    return f"{h12}:{minutes:02d} {ampm}"


def _text(t: Translate, key: str, default: str, count: int | None = None) -> str:
    if t is None:
        return default
    if count is None:
        translated = t(key, default_value=default)
    else:
        translated = t(key, default_value=default, count=count)
    return translated or default


def _locale_date(value: str, format_date: DateFormatter = None) -> str | None:
    parsed = normalize_date(value)
    if parsed is None:
        return None
    if format_date is not None:
        return format_date(parsed)
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def format_reminder(
    reminder: Reminder,
    t: Translate = None,
    *,
    use24h: bool = True,
    format_date: DateFormatter = None,
) -> str:
    """Describe *reminder*, e.g. ``"Every Monday at 10:00"``.

    A custom reminder date renders as ``M/D/YYYY`` unless *format_date* is
    given, in which case it receives the parsed ``date``.
    """
    time_str = format_time_for_display(reminder.time or DEFAULT_TIME, use24h)
    at = _text(t, "reminders.at", "at")

    if reminder.is_days_before:
        n = reminder.days_before
        unit = _text(t, "reminders.daysBefore", "day" if n == 1 else "days", count=n)
        before = _text(t, "reminders.beforeDueDate", "before due date")
        return f"{n} {unit} {before} {at} {time_str}"

    timeframe = reminder.timeframe
    if timeframe is Timeframe.SPECIFIC_DATE:
        specific = reminder.specific_date
        custom = _locale_date(reminder.custom_date, format_date) if reminder.custom_date else None
        if specific is SpecificDate.START_OF_WEEK:
            label = _text(t, "reminders.everyMonday", "Every Monday")
        elif specific is SpecificDate.START_OF_MONTH:
            label = _text(t, "reminders.firstOfMonth", "1st of every month")
        elif specific is SpecificDate.START_OF_YEAR:
            label = _text(t, "reminders.janFirst", "Jan 1st every year")
        elif specific is SpecificDate.CUSTOM_DATE and custom:
            label = custom
        else:
            label = _text(t, "reminders.specificDate", "Specific date")
    elif timeframe is Timeframe.EVERY_DAY:
        label = _text(t, "reminders.everyDay", "Every day")
    elif timeframe is Timeframe.EVERY_WEEK:
        weekday = reminder.day_of_week if is_valid_weekday(reminder.day_of_week) else MONDAY
        name = DAY_NAMES[weekday]
        every = _text(t, "reminders.every", "Every")
        label = f"{every} {_text(t, f'reminders.dayNames.{name.lower()}', name)}"
    elif timeframe is Timeframe.EVERY_MONTH:
        label = _text(t, "reminders.firstOfMonth", "1st of every month")
    elif timeframe is Timeframe.EVERY_YEAR:
        label = _text(t, "reminders.sameDateYearly", "Same date every year")
    else:
        return ""

    return f"{label} {at} {time_str}"
