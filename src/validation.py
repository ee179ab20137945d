"""Input checks for the reminder editor.

Every check returns a ``ValidationResult`` instead of raising so that forms
can show the message inline and block saving.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from date_rules import is_valid_weekday, normalize_date
from reminder import Reminder, SpecificDate, Timeframe

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_INT_RE = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> ValidationResult:
        return cls(valid=False, error=error)


def _split_time(value: str | None) -> tuple[int, int] | None:
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours, minutes


def validate_time(value: str | None) -> ValidationResult:
    """Accept ``H:mm`` or ``HH:mm`` on a 24-hour clock."""
    if not isinstance(value, str) or not value.strip():
        return ValidationResult.fail("Time is required.")
    if not _TIME_RE.match(value.strip()):
        return ValidationResult.fail("Time must be in HH:mm format.")
    if _split_time(value) is None:
        return ValidationResult.fail("Hours must be 0-23 and minutes 0-59.")
    return ValidationResult.ok()


def normalize_time(value: str | None) -> str | None:
    """Zero-pad a valid time to ``HH:mm``; ``None`` when it is not valid."""
    parts = _split_time(value)
    if parts is None:
        return None
    return f"{parts[0]:02d}:{parts[1]:02d}"


def validate_custom_reminder_date(
    value: str | date | None, today: date | None = None,
) -> ValidationResult:
    """A custom reminder date must parse and must not lie in the past."""
    if today is None:
        today = date.today()
    if value is None or (isinstance(value, str) and not value.strip()):
        return ValidationResult.fail("Please select a date.")
    parsed = normalize_date(value)
    if parsed is None:
        return ValidationResult.fail("Invalid date.")
    if parsed < today:
        return ValidationResult.fail("Date cannot be in the past.")
    return ValidationResult.ok()


def validate_days_before(value: str | int | None) -> ValidationResult:
    """Days before the due date must be a non-negative whole number."""
    if isinstance(value, bool) or value is None:
        return ValidationResult.fail("Days before must be a whole number.")
    if isinstance(value, int):
        number = value
    else:
        text = str(value).strip()
        if not _INT_RE.match(text):
            return ValidationResult.fail("Days before must be a whole number.")
        number = int(text)
    if number < 0:
        return ValidationResult.fail("Days before cannot be negative.")
    return ValidationResult.ok()


def validate_reminder(
    reminder: Reminder,
    due_date: str | date | None,
    today: date | None = None,
) -> ValidationResult:
    """Run the editor checks for one reminder and return the first failure.

    Unlike decoding, which silently drops a days-before reminder on a task
    without a due date, saving one is rejected.
    """
    result = validate_time(reminder.time or "")
    if not result.valid:
        return result

    if (
        reminder.timeframe is Timeframe.SPECIFIC_DATE
        and reminder.specific_date is SpecificDate.CUSTOM_DATE
        and not reminder.is_days_before
    ):
        result = validate_custom_reminder_date(reminder.custom_date, today)
        if not result.valid:
            return result

    if (
        reminder.timeframe is Timeframe.EVERY_WEEK
        and reminder.day_of_week is not None
        and not is_valid_weekday(reminder.day_of_week)
    ):
        return ValidationResult.fail("Day of week must be 0 (Sunday) to 6 (Saturday).")

    if reminder.days_before is not None:
        result = validate_days_before(reminder.days_before)
        if not result.valid:
            return result
        if reminder.days_before > 0 and normalize_date(due_date) is None:
            return ValidationResult.fail(
                "Set a due date first to use days-before reminders."
            )

    return ValidationResult.ok()
