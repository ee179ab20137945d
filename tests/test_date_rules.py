"""Tests for date occurrence rules."""

from datetime import date, datetime, timezone

import pytest

from date_rules import (
    ListType, TaskContext,
    effective_due_date, js_weekday, next_occurrence_after, next_sunday,
    next_weekday, normalize_date, occurs_on,
)

# 2026-02-16 is a Monday, 2026-02-22 a Sunday.
MONDAY = date(2026, 2, 16)
WEDNESDAY = date(2026, 2, 18)
SUNDAY = date(2026, 2, 22)


class TestNormalizeDate:
    def test_iso_datetime_with_z(self):
        assert normalize_date("2026-01-30T00:00:00.000Z") == date(2026, 1, 30)

    def test_plain_date_string(self):
        assert normalize_date("2026-01-30") == date(2026, 1, 30)

    def test_datetime_truncated_without_conversion(self):
        dt = datetime(2026, 1, 30, 23, 59, tzinfo=timezone.utc)
        assert normalize_date(dt) == date(2026, 1, 30)

    def test_empty_and_garbage(self):
        assert normalize_date(None) is None
        assert normalize_date("") is None
        assert normalize_date("not a date") is None


def test_js_weekday():
    assert js_weekday(SUNDAY) == 0
    assert js_weekday(MONDAY) == 1
    assert js_weekday(date(2026, 2, 21)) == 6


class TestNextWeekday:
    def test_later_in_week(self):
        assert next_weekday(WEDNESDAY, 5) == date(2026, 2, 20)

    def test_wraps_to_next_week(self):
        assert next_weekday(WEDNESDAY, 1) == date(2026, 2, 23)

    def test_same_day_is_strictly_after_by_default(self):
        assert next_weekday(MONDAY, 1) == date(2026, 2, 23)

    def test_same_day_allowed(self):
        assert next_weekday(MONDAY, 1, include_today=True) == MONDAY

    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            next_weekday(MONDAY, 7)


def test_next_sunday():
    # Wednesday 2026-02-18 → Sunday 2026-02-22
    assert next_sunday(WEDNESDAY) == SUNDAY
    # Sunday stays on Sunday
    assert next_sunday(SUNDAY) == SUNDAY
    # Monday → next Sunday
    assert next_sunday(MONDAY) == SUNDAY


class TestOccursOn:
    def test_due_date_exact_match(self):
        ctx = TaskContext(due_date=date(2026, 1, 30))
        assert occurs_on(ctx, date(2026, 1, 30))
        assert not occurs_on(ctx, date(2026, 1, 31))

    def test_due_date_wins_over_weekday_and_cadence(self):
        ctx = TaskContext(due_date=date(2026, 2, 18), specific_day_of_week=1, list_type=ListType.DAILY)
        assert not occurs_on(ctx, MONDAY)
        assert occurs_on(ctx, WEDNESDAY)

    def test_weekday_rule(self):
        ctx = TaskContext(specific_day_of_week=3, list_type=ListType.WEEKLY)
        assert occurs_on(ctx, WEDNESDAY)
        assert not occurs_on(ctx, SUNDAY)

    def test_daily(self):
        ctx = TaskContext(list_type=ListType.DAILY)
        assert all(occurs_on(ctx, date(2026, 2, d)) for d in range(1, 29))

    def test_weekly_only_on_sunday(self):
        ctx = TaskContext(list_type=ListType.WEEKLY)
        hits = [d for d in range(15, 29) if occurs_on(ctx, date(2026, 2, d))]
        assert hits == [15, 22]

    def test_monthly_only_on_first(self):
        ctx = TaskContext(list_type=ListType.MONTHLY)
        assert occurs_on(ctx, date(2026, 3, 1))
        assert not occurs_on(ctx, date(2026, 3, 2))

    def test_yearly_only_on_jan_first(self):
        ctx = TaskContext(list_type=ListType.YEARLY)
        assert occurs_on(ctx, date(2027, 1, 1))
        assert not occurs_on(ctx, date(2026, 2, 1))

    @pytest.mark.parametrize("list_type", [ListType.CUSTOM, ListType.FINISHED])
    def test_no_implicit_schedule(self, list_type):
        ctx = TaskContext(list_type=list_type)
        assert not occurs_on(ctx, SUNDAY)
        assert not occurs_on(ctx, date(2026, 1, 1))


def test_list_type_parse_unknown_is_custom():
    assert ListType.parse("weekly") is ListType.WEEKLY
    assert ListType.parse("SOMETIMES") is ListType.CUSTOM
    assert ListType.parse(None) is ListType.CUSTOM


class TestNextOccurrenceAfter:
    def test_weekday_rule_strictly_after(self):
        ctx = TaskContext(specific_day_of_week=1)
        assert next_occurrence_after(MONDAY, ctx) == date(2026, 2, 23)
        assert next_occurrence_after(MONDAY, ctx, include_today=True) == MONDAY

    def test_weekly_from_sunday_is_next_sunday(self):
        ctx = TaskContext(list_type=ListType.WEEKLY)
        assert next_occurrence_after(SUNDAY, ctx) == date(2026, 3, 1)

    def test_monthly_rolls_over_year(self):
        ctx = TaskContext(list_type=ListType.MONTHLY)
        assert next_occurrence_after(date(2026, 12, 15), ctx) == date(2027, 1, 1)
        assert next_occurrence_after(date(2026, 1, 31), ctx) == date(2026, 2, 1)

    def test_yearly(self):
        ctx = TaskContext(list_type=ListType.YEARLY)
        assert next_occurrence_after(date(2026, 1, 1), ctx) == date(2027, 1, 1)
        assert next_occurrence_after(date(2026, 1, 1), ctx, include_today=True) == date(2026, 1, 1)

    def test_no_next_occurrence(self):
        assert next_occurrence_after(MONDAY, TaskContext(list_type=ListType.DAILY)) is None
        assert next_occurrence_after(MONDAY, TaskContext(list_type=ListType.CUSTOM)) is None

    def test_out_of_range_weekday(self):
        assert next_occurrence_after(MONDAY, TaskContext(specific_day_of_week=9)) is None


def test_effective_due_date_prefers_explicit_due_date():
    ctx = TaskContext(due_date=date(2026, 1, 30), list_type=ListType.WEEKLY)
    assert effective_due_date(ctx, MONDAY) == date(2026, 1, 30)
    assert effective_due_date(TaskContext(list_type=ListType.WEEKLY), MONDAY) == SUNDAY
