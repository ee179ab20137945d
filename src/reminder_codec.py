"""Conversion between the compact backend reminder fields and descriptors.

The backend stores reminders in three task fields:

- ``reminderDaysBefore``: day offsets before the due date (legacy records
  hold a bare integer),
- ``specificDayOfWeek``: a single weekly rule (Sunday=0),
- ``reminderConfig``: every other reminder, as a JSON array, a single object,
  a JSON-encoded string of either, or null.

``decode`` is tolerant: corrupt data contributes nothing so one bad record
cannot break a list view.  ``encode`` always returns all three fields so that
clearing reminders is representable as ``[] / None / None``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from date_rules import MONDAY, is_valid_weekday, normalize_date
from reminder import DEFAULT_TIME, Reminder, Timeframe
from validation import normalize_time

logger = logging.getLogger(__name__)

# Guards against pathological multiply-encoded strings.
_MAX_STRING_DEPTH = 2


@dataclass
class BackendReminders:
    """The persisted reminder fields of a task."""

    reminder_days_before: list[int]
    specific_day_of_week: int | None
    reminder_config: list[dict] | None

    def to_dict(self) -> dict:
        return {
            "reminderDaysBefore": list(self.reminder_days_before),
            "specificDayOfWeek": self.specific_day_of_week,
            "reminderConfig": self.reminder_config,
        }


def days_before_id(days: int) -> str:
    return f"days-before-{days}"


def day_of_week_id(weekday: int) -> str:
    return f"day-of-week-{weekday}"


def derived_key(reminder: Reminder) -> str | None:
    """Key derived from the rule of a days-before or weekly reminder.

    This is content, not identity: changing the offset or weekday changes the
    key.  Reminders stored in ``reminderConfig`` have no derived key.
    """
    if reminder.is_days_before:
        return days_before_id(reminder.days_before)
    if reminder.timeframe is Timeframe.EVERY_WEEK and reminder.day_of_week is not None:
        return day_of_week_id(reminder.day_of_week)
    return None


def coerce_days_before(raw) -> list[int]:
    """Read ``reminderDaysBefore``, accepting the legacy bare integer."""
    if raw is None:
        return []
    if isinstance(raw, bool):
        logger.warning("ignoring malformed reminderDaysBefore %r", raw)
        return []
    if isinstance(raw, int):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        logger.warning("ignoring malformed reminderDaysBefore %r", raw)
        return []
    days: list[int] = []
    for value in raw:
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            days.append(value)
        else:
            logger.warning("skipping malformed reminderDaysBefore entry %r", value)
    return days


def parse_reminder_config(raw, _depth: int = 0) -> list[dict]:
    """Normalize the polymorphic ``reminderConfig`` payload to a list of dicts.

    Arrays are used as-is, a single object is wrapped, strings are parsed as
    JSON and the result normalized again.  Anything else, including malformed
    JSON, yields an empty list.
    """
    if raw is None:
        return []
    if isinstance(raw, list):
        entries = []
        for item in raw:
            if isinstance(item, dict):
                entries.append(item)
            else:
                logger.warning("skipping non-object reminderConfig entry %r", item)
        return entries
    if isinstance(raw, dict):
        return [raw]
    if isinstance(raw, str):
        if not raw.strip() or _depth >= _MAX_STRING_DEPTH:
            return []
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("malformed reminderConfig JSON: %s", exc)
            return []
        return parse_reminder_config(parsed, _depth + 1)
    logger.warning("unsupported reminderConfig type %s", type(raw).__name__)
    return []


def decode(
    reminder_days_before,
    specific_day_of_week,
    due_date: str | date | None,
    reminder_config,
) -> list[Reminder]:
    """Build the descriptor list for a task's persisted reminder fields.

    Order is stable: days-before reminders, then the weekly reminder, then
    the ``reminderConfig`` entries.  Days-before offsets are dropped when the
    task has no due date.
    """
    reminders: list[Reminder] = []

    if normalize_date(due_date) is not None:
        for days in coerce_days_before(reminder_days_before):
            reminders.append(Reminder(
                id=days_before_id(days),
                timeframe=Timeframe.SPECIFIC_DATE,
                time=DEFAULT_TIME,
                days_before=days,
            ))

    if specific_day_of_week is not None:
        if is_valid_weekday(specific_day_of_week):
            reminders.append(Reminder(
                id=day_of_week_id(specific_day_of_week),
                timeframe=Timeframe.EVERY_WEEK,
                time=DEFAULT_TIME,
                day_of_week=specific_day_of_week,
            ))
        else:
            logger.warning("ignoring out-of-range specificDayOfWeek %r", specific_day_of_week)

    for entry in parse_reminder_config(reminder_config):
        try:
            reminders.append(Reminder.from_dict(entry))
        except (ValueError, TypeError) as exc:
            logger.warning("skipping invalid reminderConfig entry %r: %s", entry, exc)

    return reminders


def encode(reminders: Iterable[Reminder], due_date: str | date | None = None) -> BackendReminders:
    """Split descriptors into the three backend fields.

    Days-before reminders count only when the task has a due date.  Only one
    weekly rule fits in ``specificDayOfWeek``; when several are given the
    last one wins and a warning is logged.  A missing or out-of-range
    weekday is stored as Monday.
    """
    has_due_date = normalize_date(due_date) is not None
    days: set[int] = set()
    weekly: list[Reminder] = []
    config: list[dict] = []

    for reminder in reminders:
        if reminder.is_days_before and has_due_date:
            days.add(reminder.days_before)
        elif reminder.timeframe is Timeframe.EVERY_WEEK:
            weekly.append(reminder)
        else:
            time = normalize_time(reminder.time) or DEFAULT_TIME
            config.append(reminder.with_changes(time=time).to_dict())

    specific_day_of_week = None
    if weekly:
        if len(weekly) > 1:
            logger.warning(
                "only one weekly reminder can be stored; keeping %s, dropping %s",
                weekly[-1].id, [r.id for r in weekly[:-1]],
            )
        last = weekly[-1]
        if is_valid_weekday(last.day_of_week):
            specific_day_of_week = last.day_of_week
        else:
            if last.day_of_week is not None:
                logger.warning("out-of-range dayOfWeek %r on %s, storing Monday",
                               last.day_of_week, last.id)
            specific_day_of_week = MONDAY

    return BackendReminders(
        reminder_days_before=sorted(days, reverse=True),
        specific_day_of_week=specific_day_of_week,
        reminder_config=config or None,
    )


def collect_reminder_times(reminders: Iterable[Reminder]) -> dict[str, str]:
    """Map each reminder to its time, keyed the way ``decode`` will key it.

    The compact fields do not carry times for days-before and weekly
    reminders, so clients keep this map alongside the task.
    """
    times: dict[str, str] = {}
    for reminder in reminders:
        time = normalize_time(reminder.time)
        if time is None:
            continue
        times[derived_key(reminder) or reminder.id] = time
    return times


def apply_reminder_times(reminders: Iterable[Reminder], times: dict[str, str] | None) -> list[Reminder]:
    """Overlay locally stored times onto decoded reminders; invalid times are ignored."""
    if not times:
        return list(reminders)
    result = []
    for reminder in reminders:
        time = normalize_time(times.get(reminder.id))
        result.append(reminder.with_changes(time=time) if time else reminder)
    return result


def is_repeating(task, reminders: Iterable[Reminder] | None = None) -> bool:
    """A task repeats when it has a weekly rule or any every-day reminder."""
    if task.specific_day_of_week is not None:
        return True
    return any(r.timeframe is Timeframe.EVERY_DAY for r in reminders or ())
