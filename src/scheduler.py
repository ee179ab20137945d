"""Scheduler tick: find tasks whose reminders fire today and notify their devices."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import date

from dotenv import load_dotenv

import notifications
import reminder_codec
from date_rules import effective_due_date
from occurrence import filter_reminder_firing
from task import Task

logger = logging.getLogger(__name__)


def notify_task(task: Task, today: date) -> None:
    """Send the task's reminders, anchored on its effective due date."""
    due = effective_due_date(task.context, today)
    reminders = reminder_codec.decode(
        task.reminder_days_before,
        task.specific_day_of_week,
        due,
        task.reminder_config,
    )
    notifications.schedule_task_reminders(task.id, task.description, due, reminders)


def run_tick(today: date | None = None, user_id: str | None = None) -> list[str]:
    """Notify every open task with a reminder firing on *today*.

    Returns the IDs of the tasks notified.  A failure for one task is logged
    and does not stop the others.  Nothing is written to the store, so
    overlapping ticks only repeat notifications.
    """
    import firestore_storage

    if today is None:
        today = date.today()

    tasks = firestore_storage.load_open_tasks(user_id)
    firing = filter_reminder_firing(tasks, today)
    notified: list[str] = []
    for task in firing:
        try:
            notify_task(task, today)
        except Exception:
            logger.warning("Failed to notify task %s", task.id, exc_info=True)
            continue
        notified.append(task.id)
    logger.info("tick today=%s loaded=%d firing=%d notified=%d",
                today, len(tasks), len(firing), len(notified))
    return notified


def _log_firestore_config() -> None:
    """Log Firestore client configuration for debugging."""
    project = os.environ.get("GOOGLE_CLOUD_PROJECT", "(not set)")
    database = os.environ.get("TASKS_FIRESTORE_DATABASE", "(not set)")
    logger.info("Firestore config: project=%s, database=%s", project, database)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the reminder scheduler."""
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(
        description="Send notifications for reminders firing today",
    )
    parser.add_argument(
        "--today", type=date.fromisoformat, default=None,
        help="Override today's date for testing",
    )
    parser.add_argument(
        "--user-id", type=str, default=None,
        help="Only process tasks owned by this user",
    )
    args = parser.parse_args(argv)
    today = args.today or date.today()

    _log_firestore_config()

    try:
        logger.info("Starting reminder tick (today=%s)...", today)
        notified = run_tick(today, user_id=args.user_id)
        for task_id in notified:
            print(f"Notified task: {task_id}")
        logger.info("Reminder tick done: %d notified.", len(notified))
    except Exception:
        logger.exception("Reminder tick failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
