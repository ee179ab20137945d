"""Tests for the reminder scheduler tick."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

import scheduler
from date_rules import ListType
from task import Task


def _make_task(**kwargs) -> Task:
    defaults = dict(id="t1", description="Pay rent", due_date=date(2026, 1, 30), reminder_days_before=[1])
    defaults.update(kwargs)
    return Task(**defaults)


class TestRunTick:
    @patch("notifications.schedule_task_reminders")
    @patch("firestore_storage.load_open_tasks")
    def test_notifies_firing_tasks(self, mock_load, mock_schedule):
        firing = _make_task(id="firing")
        quiet = _make_task(id="quiet", due_date=date(2026, 2, 15))
        mock_load.return_value = [firing, quiet]

        notified = scheduler.run_tick(date(2026, 1, 29))

        assert notified == ["firing"]
        mock_load.assert_called_once_with(None)
        mock_schedule.assert_called_once()
        task_id, description, due_date, reminders = mock_schedule.call_args.args
        assert (task_id, description, due_date) == ("firing", "Pay rent", date(2026, 1, 30))
        assert [r.id for r in reminders] == ["days-before-1"]

    @patch("notifications.schedule_task_reminders")
    @patch("firestore_storage.load_open_tasks")
    def test_passes_user_filter(self, mock_load, mock_schedule):
        mock_load.return_value = []
        assert scheduler.run_tick(date(2026, 1, 29), user_id="alice") == []
        mock_load.assert_called_once_with("alice")
        mock_schedule.assert_not_called()

    @patch("notifications.schedule_task_reminders")
    @patch("firestore_storage.load_open_tasks")
    def test_one_failure_does_not_stop_others(self, mock_load, mock_schedule):
        mock_load.return_value = [_make_task(id="a"), _make_task(id="b")]
        mock_schedule.side_effect = [RuntimeError("boom"), "msg-2"]

        assert scheduler.run_tick(date(2026, 1, 29)) == ["b"]
        assert mock_schedule.call_count == 2

    @patch("notifications.schedule_task_reminders")
    @patch("firestore_storage.load_open_tasks")
    def test_cadence_task_includes_weekly_rule(self, mock_load, mock_schedule):
        task = _make_task(id="w", due_date=None, list_type=ListType.WEEKLY, specific_day_of_week=1,
                          reminder_days_before=[2])
        mock_load.return_value = [task]

        # Saturday before Monday 2026-02-23
        assert scheduler.run_tick(date(2026, 2, 21)) == ["w"]
        _, _, due_date, reminders = mock_schedule.call_args.args
        assert due_date == date(2026, 2, 23)
        assert [r.id for r in reminders] == ["days-before-2", "day-of-week-1"]


class TestMain:
    @patch("scheduler.run_tick", return_value=["t1", "t2"])
    def test_prints_notified(self, mock_tick, capsys):
        scheduler.main(["--today", "2026-01-29", "--user-id", "alice"])

        mock_tick.assert_called_once_with(date(2026, 1, 29), user_id="alice")
        out = capsys.readouterr().out
        assert "Notified task: t1" in out
        assert "Notified task: t2" in out

    @patch("scheduler.run_tick", side_effect=RuntimeError("firestore down"))
    def test_exits_on_failure(self, mock_tick):
        with pytest.raises(SystemExit) as exc_info:
            scheduler.main(["--today", "2026-01-29"])
        assert exc_info.value.code == 1
