"""Hand reminders to the device notification scheduler via Firebase Cloud Messaging.

Devices subscribe to the ``task-{id}`` topic and schedule or cancel local
notifications from the data payload.  Delivery and retries are the messaging
service's concern.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import date
from typing import Iterable

from reminder import Reminder

logger = logging.getLogger(__name__)


def _topic(task_id: str) -> str:
    return f"task-{task_id}"


def _dry_run() -> bool:
    return os.environ.get("REMINDER_NOTIFICATIONS_DRY_RUN", "").lower() in {"1", "true", "yes"}


def _send(task_id: str, data: dict[str, str]) -> str | None:
    """Send a data message to the task topic. Returns the message ID."""
    if _dry_run():
        logger.info("dry-run notification topic=%s action=%s", _topic(task_id), data["action"])
        return None

    import firebase_admin
    from firebase_admin import messaging

    if not firebase_admin._apps:
        firebase_admin.initialize_app()

    message = messaging.Message(data=data, topic=_topic(task_id))
    return messaging.send(message)


def schedule_task_reminders(
    task_id: str,
    description: str,
    due_date: date | None,
    reminders: Iterable[Reminder],
) -> str | None:
    """Ask devices to (re)schedule the notifications of a task."""
    payload = [r.to_dict() for r in reminders]
    data = {
        "action": "schedule",
        "taskId": str(task_id),
        "description": description,
        "dueDate": due_date.isoformat() if due_date else "",
        "reminders": json.dumps(payload),
    }
    message_id = _send(task_id, data)
    logger.info("schedule_task_reminders task=%s reminders=%d", task_id, len(payload))
    return message_id


def cancel_all_task_notifications(task_id: str) -> str | None:
    """Ask devices to drop every pending notification of a task."""
    message_id = _send(task_id, {"action": "cancel", "taskId": str(task_id)})
    logger.info("cancel_all_task_notifications task=%s", task_id)
    return message_id
