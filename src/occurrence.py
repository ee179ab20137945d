"""Batch occurrence queries over task collections.

Used by the reminder scheduler tick and by list loading.  Nothing here reads
the clock: the day being asked about is always passed in, so repeated or
overlapping calls with the same inputs give the same answer.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

import reminder_codec
from date_rules import effective_due_date, normalize_date, occurs_on
from task import Task

logger = logging.getLogger(__name__)


def filter_due_today(tasks: Iterable[Task], day: date) -> list[Task]:
    """Open tasks that occur on *day*."""
    day = normalize_date(day)
    return [t for t in tasks if not t.completed and occurs_on(t.context, day)]


def reminder_trigger_dates(task: Task, reference: date) -> list[date]:
    """Days on which the days-before reminders of *task* fire.

    Offsets count back from the task's due date, or for tasks without one
    from the next occurrence of their weekday rule or list cadence after
    *reference*.
    """
    reference = normalize_date(reference)
    due = effective_due_date(task.context, reference)
    if due is None:
        return []
    reminders = reminder_codec.decode(task.reminder_days_before, None, due, None)
    return [due - timedelta(days=r.days_before) for r in reminders if r.days_before is not None]


def filter_reminder_firing(tasks: Iterable[Task], day: date) -> list[Task]:
    """Open tasks with at least one reminder firing on *day*."""
    day = normalize_date(day)
    firing = []
    for task in tasks:
        if task.completed:
            continue
        if day in reminder_trigger_dates(task, day):
            firing.append(task)
    logger.debug("filter_reminder_firing day=%s firing=%d", day, len(firing))
    return firing


def reminders_for_range(tasks: Iterable[Task], start: date, end: date) -> list[tuple[date, Task]]:
    """``(day, task)`` pairs for every reminder firing between *start* and *end* inclusive."""
    start, end = normalize_date(start), normalize_date(end)
    if end < start:
        raise ValueError(f"end {end} is before start {start}")
    tasks = list(tasks)
    results: list[tuple[date, Task]] = []
    day = start
    while day <= end:
        results.extend((day, task) for task in filter_reminder_firing(tasks, day))
        day += timedelta(days=1)
    return results
