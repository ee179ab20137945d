"""Firestore-backed storage for task records."""

from __future__ import annotations

import os

from reminder_codec import BackendReminders
from task import Task

COLLECTION = "tasks"


def _get_client():
    """Return a Firestore client (lazy import to avoid import-time errors).

    Respects ``TASKS_FIRESTORE_DATABASE`` to select a non-default
    database and ``GOOGLE_CLOUD_PROJECT`` for the project ID.
    """
    from google.cloud import firestore

    kwargs: dict[str, str] = {}
    database = os.environ.get("TASKS_FIRESTORE_DATABASE")
    if database:
        kwargs["database"] = database
    project = os.environ.get("GOOGLE_CLOUD_PROJECT")
    if project:
        kwargs["project"] = project
    return firestore.Client(**kwargs)


def load_open_tasks(user_id: str | None = None) -> list[Task]:
    """Load tasks that are not completed, optionally for a single user."""
    db = _get_client()
    query = db.collection(COLLECTION).where("completed", "==", False)
    if user_id:
        query = query.where("userId", "==", user_id)
    return [Task.from_dict(doc.to_dict(), task_id=doc.id) for doc in query.stream()]


def get_task(task_id: str) -> Task | None:
    """Get a single task by document ID. Returns None if not found."""
    db = _get_client()
    doc = db.collection(COLLECTION).document(task_id).get()
    if not doc.exists:
        return None
    return Task.from_dict(doc.to_dict(), task_id=doc.id)


def save_reminders(task_id: str, encoded: BackendReminders) -> None:
    """Write the three reminder fields of a task.

    All three are always written so that cleared reminders overwrite
    whatever was stored before.
    """
    db = _get_client()
    db.collection(COLLECTION).document(task_id).update(encoded.to_dict())
