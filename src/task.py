"""Task records as read from and written to the task store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from date_rules import ListType, TaskContext, normalize_date


@dataclass
class Task:
    """A task plus the fields of its list that scheduling needs.

    ``reminder_days_before`` and ``reminder_config`` are kept exactly as
    stored; only ``reminder_codec`` interprets them.
    """

    id: str
    description: str = ""
    due_date: date | None = None
    specific_day_of_week: int | None = None
    list_type: ListType = ListType.CUSTOM
    completed: bool = False
    reminder_days_before: object = field(default_factory=list)
    reminder_config: object = None
    user_id: str | None = None

    @property
    def context(self) -> TaskContext:
        return TaskContext(
            due_date=self.due_date,
            specific_day_of_week=self.specific_day_of_week,
            list_type=self.list_type,
        )

    def to_dict(self) -> dict:
        """Serialize to the camelCase document shape used by the store."""
        return {
            "description": self.description,
            "dueDate": self.due_date.isoformat() if self.due_date is not None else None,
            "specificDayOfWeek": self.specific_day_of_week,
            "listType": self.list_type.value,
            "completed": self.completed,
            "reminderDaysBefore": self.reminder_days_before,
            "reminderConfig": self.reminder_config,
            "userId": self.user_id,
        }

    @classmethod
    def from_dict(cls, data: dict, task_id: str | None = None) -> Task:
        """Deserialize a stored document.

        The list type may be flat (``listType``) or nested the way list
        queries return it (``todoList: {"type": ...}``).
        """
        raw_list_type = data.get("listType")
        if raw_list_type is None and isinstance(data.get("todoList"), dict):
            raw_list_type = data["todoList"].get("type")
        raw_weekday = data.get("specificDayOfWeek")
        return cls(
            id=str(task_id if task_id is not None else data.get("id", "")),
            description=data.get("description") or "",
            due_date=normalize_date(data.get("dueDate")),
            specific_day_of_week=raw_weekday if isinstance(raw_weekday, int) and not isinstance(raw_weekday, bool) else None,
            list_type=ListType.parse(raw_list_type),
            completed=bool(data.get("completed", False)),
            reminder_days_before=data.get("reminderDaysBefore"),
            reminder_config=data.get("reminderConfig"),
            user_id=data.get("userId"),
        )
