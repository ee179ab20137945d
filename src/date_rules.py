"""Date-occurrence rules for tasks: due dates, weekday rules and list cadences.

Every comparison here is a local calendar-day comparison.  Datetimes are
truncated to their date as given; no timezone conversion is performed, so a
list shared across timezones sees each user's own calendar day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

logger = logging.getLogger(__name__)

SUNDAY = 0
MONDAY = 1


class ListType(str, Enum):
    """Cadence of the list that owns a task."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    CUSTOM = "CUSTOM"
    FINISHED = "FINISHED"

    @classmethod
    def parse(cls, value: str | ListType | None) -> ListType:
        """Parse a persisted list type; unknown values behave like CUSTOM."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.CUSTOM


@dataclass(frozen=True)
class TaskContext:
    """The read-only facts that decide when a task occurs."""

    due_date: date | None = None
    specific_day_of_week: int | None = None
    list_type: ListType = ListType.CUSTOM


def normalize_date(value: str | date | datetime | None) -> date | None:
    """Truncate *value* to a calendar date.

    Accepts ``date``, ``datetime`` and ISO-8601 strings (``2026-01-30`` or
    ``2026-01-30T00:00:00.000Z``).  Returns ``None`` for empty or
    unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug("unparseable date %r", value)
        return None


def js_weekday(d: date) -> int:
    """Weekday of *d* with Sunday=0 .. Saturday=6."""
    return (d.weekday() + 1) % 7


def is_valid_weekday(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 6


def next_weekday(reference: date, weekday: int, *, include_today: bool = False) -> date:
    """Return the next date on *weekday* (Sunday=0) after *reference*.

    A reference that already falls on *weekday* yields itself only when
    *include_today* is set; otherwise the same weekday one week later.
    """
    if not is_valid_weekday(weekday):
        raise ValueError(f"weekday must be 0-6, got {weekday!r}")
    days_ahead = (weekday - js_weekday(reference)) % 7
    if days_ahead == 0 and not include_today:
        days_ahead = 7
    return reference + timedelta(days=days_ahead)


def next_sunday(d: date) -> date:
    """Return the coming Sunday (same day if *d* is already Sunday)."""
    return next_weekday(d, SUNDAY, include_today=True)


def first_of_next_month(d: date) -> date:
    if d.month == 12:
        return date(d.year + 1, 1, 1)
    return date(d.year, d.month + 1, 1)


def first_of_next_year(d: date) -> date:
    return date(d.year + 1, 1, 1)


def occurs_on(context: TaskContext, d: date) -> bool:
    """Check whether a task with *context* occurs on calendar day *d*.

    The first applicable rule decides: explicit due date, then weekday rule,
    then the owning list's cadence.
    """
    d = normalize_date(d)
    if context.due_date is not None:
        return normalize_date(context.due_date) == d
    if context.specific_day_of_week is not None:
        return js_weekday(d) == context.specific_day_of_week

    cadence = context.list_type
    if cadence is ListType.DAILY:
        return True
    if cadence is ListType.WEEKLY:
        return js_weekday(d) == SUNDAY
    if cadence is ListType.MONTHLY:
        return d.day == 1
    if cadence is ListType.YEARLY:
        return d.month == 1 and d.day == 1
    return False


def next_occurrence_after(
    reference: date,
    context: TaskContext,
    *,
    include_today: bool = False,
) -> date | None:
    """Return the next date a weekday rule or list cadence lands on.

    Weekday rules win over the cadence.  Cadence fallbacks: the next Sunday
    for WEEKLY, the first of next month for MONTHLY and Jan 1 of next year
    for YEARLY.  DAILY, CUSTOM and FINISHED lists have no next occurrence.
    """
    reference = normalize_date(reference)
    weekday = context.specific_day_of_week
    if weekday is not None:
        if not is_valid_weekday(weekday):
            logger.debug("ignoring out-of-range weekday %r", weekday)
            return None
        return next_weekday(reference, weekday, include_today=include_today)

    cadence = context.list_type
    if cadence is ListType.WEEKLY:
        return next_weekday(reference, SUNDAY, include_today=include_today)
    if cadence is ListType.MONTHLY:
        if include_today and reference.day == 1:
            return reference
        return first_of_next_month(reference)
    if cadence is ListType.YEARLY:
        if include_today and (reference.month, reference.day) == (1, 1):
            return reference
        return first_of_next_year(reference)
    return None


def effective_due_date(context: TaskContext, reference: date) -> date | None:
    """The date days-before reminders of a task count back from.

    An explicit due date is used as-is; otherwise the next occurrence
    strictly after *reference*.
    """
    if context.due_date is not None:
        return normalize_date(context.due_date)
    return next_occurrence_after(reference, context)
