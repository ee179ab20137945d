"""Normalized reminder descriptors, the in-memory unit every client edits."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum

DEFAULT_TIME = "09:00"

DAY_NAMES = [
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
]


class Timeframe(str, Enum):
    SPECIFIC_DATE = "SPECIFIC_DATE"
    EVERY_DAY = "EVERY_DAY"
    EVERY_WEEK = "EVERY_WEEK"
    EVERY_MONTH = "EVERY_MONTH"
    EVERY_YEAR = "EVERY_YEAR"


class SpecificDate(str, Enum):
    START_OF_WEEK = "START_OF_WEEK"
    START_OF_MONTH = "START_OF_MONTH"
    START_OF_YEAR = "START_OF_YEAR"
    CUSTOM_DATE = "CUSTOM_DATE"


# Wire keys handled explicitly; anything else rides along in ``extra``.
_KNOWN_KEYS = {
    "id", "timeframe", "time", "specificDate", "customDate",
    "dayOfWeek", "daysBefore", "hasAlarm", "location",
}


def generate_reminder_id() -> str:
    """Return a fresh id for a reminder created in an editor."""
    return f"reminder-{uuid.uuid4().hex}"


@dataclass
class Reminder:
    """One reminder rule.

    ``timeframe`` decides which of the optional fields matter.  A positive
    ``days_before`` overrides the timeframe entirely: the reminder fires that
    many days before the task's due date.
    """

    id: str
    timeframe: Timeframe
    time: str | None = None
    specific_date: SpecificDate | None = None
    custom_date: str | None = None
    day_of_week: int | None = None
    days_before: int | None = None
    has_alarm: bool | None = None
    location: str | None = None
    extra: dict = field(default_factory=dict)

    @property
    def is_days_before(self) -> bool:
        return self.days_before is not None and self.days_before > 0

    def with_changes(self, **changes) -> Reminder:
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Serialize to the camelCase wire shape, omitting unset fields."""
        d: dict = dict(self.extra)
        d["id"] = self.id
        d["timeframe"] = self.timeframe.value
        optional = {
            "time": self.time,
            "specificDate": self.specific_date.value if self.specific_date else None,
            "customDate": self.custom_date,
            "dayOfWeek": self.day_of_week,
            "daysBefore": self.days_before,
            "hasAlarm": self.has_alarm,
            "location": self.location,
        }
        d.update({k: v for k, v in optional.items() if v is not None})
        return d

    @classmethod
    def from_dict(cls, data: dict) -> Reminder:
        """Deserialize from the wire shape.

        Raises ``ValueError`` for an unknown timeframe or specific date, or a
        non-integer ``dayOfWeek``/``daysBefore``.  A missing id is generated and
        a non-string ``time`` is dropped.
        """
        raw_specific = data.get("specificDate")
        raw_time = data.get("time")
        return cls(
            id=data.get("id") or generate_reminder_id(),
            timeframe=Timeframe(data.get("timeframe")),
            time=raw_time if isinstance(raw_time, str) else None,
            specific_date=SpecificDate(raw_specific) if raw_specific else None,
            custom_date=data.get("customDate") or None,
            day_of_week=_optional_int(data.get("dayOfWeek")),
            days_before=_optional_int(data.get("daysBefore")),
            has_alarm=data.get("hasAlarm"),
            location=data.get("location"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )


def _optional_int(value) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"expected an integer, got {value!r}")
    return int(value)
