"""HTTP API for task reminders, deployed to Cloud Run.

The reminder conversion endpoints are stateless.  Task endpoints use
Firebase ID token auth and only touch tasks owned by the caller.
"""

from __future__ import annotations

import logging
import time
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Header, Query, Request, Response
from pydantic import BaseModel

import firestore_storage
import notifications
import reminder_codec
from occurrence import filter_due_today, filter_reminder_firing
from reminder import Reminder
from reminder_format import format_reminder
from validation import validate_reminder

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Task Reminders API")


class StripApiPrefixMiddleware:
    """Allow Firebase Hosting /api/** rewrites without requiring separate routes.

    Firebase Hosting forwards requests to Cloud Run with the original path,
    e.g. ``/api/reminders/decode``.  This middleware strips a leading ``/api``
    prefix so both paths work.
    """

    def __init__(self, inner_app):
        self.inner_app = inner_app

    async def __call__(self, scope, receive, send):
        if scope.get("type") == "http":
            path = scope.get("path") or ""
            if path == "/api":
                scope = dict(scope)
                scope["path"] = "/"
            elif path.startswith("/api/"):
                scope = dict(scope)
                scope["path"] = path[len("/api"):]
        await self.inner_app(scope, receive, send)


# Must be installed before routing.
app.add_middleware(StripApiPrefixMiddleware)


@app.middleware("http")
async def logging_middleware(request: Request, call_next) -> Response:
    start = time.monotonic()
    response = await call_next(request)
    duration_ms = round((time.monotonic() - start) * 1000, 1)

    extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": duration_ms,
    }

    trace_header = request.headers.get("x-cloud-trace-context")
    if trace_header:
        extra["trace"] = trace_header.split("/")[0]

    logger.info("request %s %s %d %.1fms", extra["method"], extra["path"],
                extra["status_code"], duration_ms, extra=extra)
    return response


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

def _verify_firebase_token(authorization: str = Header(...)) -> dict:
    """Verify a Firebase ID token and return the decoded token dict."""
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing Bearer token")
    token = authorization[len("Bearer "):]

    try:
        import firebase_admin
        from firebase_admin import auth as firebase_auth

        if not firebase_admin._apps:
            firebase_admin.initialize_app()

        decoded = firebase_auth.verify_id_token(token)
    except ImportError as exc:
        logger.error("firebase_admin_not_installed: %s", exc)
        raise HTTPException(status_code=500, detail="Firebase Admin not configured")
    except Exception as exc:
        logger.warning("firebase_auth_failure: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid Firebase token")
    return decoded


def _get_uid(token: dict = Depends(_verify_firebase_token)) -> str:
    """Extract uid from a verified Firebase token."""
    return token["uid"]


def _parse_reminders(raw: list[dict]) -> list[Reminder]:
    try:
        return [Reminder.from_dict(item) for item in raw]
    except (ValueError, TypeError) as exc:
        raise HTTPException(status_code=400, detail=f"Invalid reminder: {exc}")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class DecodeRequest(BaseModel):
    reminderDaysBefore: list[int] | int | None = None
    specificDayOfWeek: int | None = None
    dueDate: str | None = None
    reminderConfig: list | dict | str | None = None


class EncodeRequest(BaseModel):
    reminders: list[dict]
    dueDate: str | None = None


class FormatRequest(BaseModel):
    reminders: list[dict]
    use24h: bool = True


class ValidateRequest(BaseModel):
    reminder: dict
    dueDate: str | None = None


class UpdateRemindersRequest(BaseModel):
    reminders: list[dict]


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/_healthz")
@app.get("/healthz")
def healthz():
    return {"ok": True}


# ---------------------------------------------------------------------------
# Reminder conversion endpoints (no auth, no state)
# ---------------------------------------------------------------------------

@app.post("/reminders/decode")
def decode_reminders(body: DecodeRequest):
    reminders = reminder_codec.decode(
        body.reminderDaysBefore, body.specificDayOfWeek, body.dueDate, body.reminderConfig,
    )
    return {"reminders": [r.to_dict() for r in reminders]}


@app.post("/reminders/encode")
def encode_reminders(body: EncodeRequest):
    reminders = _parse_reminders(body.reminders)
    return reminder_codec.encode(reminders, body.dueDate).to_dict()


@app.post("/reminders/format")
def format_reminders(body: FormatRequest):
    reminders = _parse_reminders(body.reminders)
    return {"labels": [format_reminder(r, use24h=body.use24h) for r in reminders]}


@app.post("/reminders/validate")
def validate_reminder_endpoint(body: ValidateRequest):
    reminder = _parse_reminders([body.reminder])[0]
    result = validate_reminder(reminder, body.dueDate)
    return {"valid": result.valid, "error": result.error}


# ---------------------------------------------------------------------------
# Task endpoints (Firebase Auth)
# ---------------------------------------------------------------------------

@app.get("/users/me/tasks/today")
def list_tasks_due(day: date | None = Query(default=None, alias="date"), uid: str = Depends(_get_uid)):
    day = day or date.today()
    tasks = filter_due_today(firestore_storage.load_open_tasks(uid), day)
    return {"date": day.isoformat(), "tasks": [{"id": t.id, **t.to_dict()} for t in tasks]}


@app.get("/users/me/tasks/reminders")
def list_tasks_with_reminders(day: date | None = Query(default=None, alias="date"), uid: str = Depends(_get_uid)):
    day = day or date.today()
    tasks = filter_reminder_firing(firestore_storage.load_open_tasks(uid), day)
    return {"date": day.isoformat(), "tasks": [{"id": t.id, **t.to_dict()} for t in tasks]}


@app.put("/tasks/{task_id}/reminders")
def update_task_reminders(task_id: str, body: UpdateRemindersRequest, uid: str = Depends(_get_uid)):
    task = firestore_storage.get_task(task_id)
    if task is None or task.user_id != uid:
        raise HTTPException(status_code=404, detail="Task not found")

    reminders = _parse_reminders(body.reminders)
    for reminder in reminders:
        result = validate_reminder(reminder, task.due_date)
        if not result.valid:
            raise HTTPException(status_code=400, detail=result.error)

    encoded = reminder_codec.encode(reminders, task.due_date)
    firestore_storage.save_reminders(task_id, encoded)

    if reminders:
        notifications.schedule_task_reminders(task_id, task.description, task.due_date, reminders)
    else:
        notifications.cancel_all_task_notifications(task_id)

    logger.info("update_task_reminders task=%s uid=%s count=%d", task_id, uid, len(reminders))
    stored = reminder_codec.decode(
        encoded.reminder_days_before, encoded.specific_day_of_week,
        task.due_date, encoded.reminder_config,
    )
    return {**encoded.to_dict(), "reminders": [r.to_dict() for r in stored]}
