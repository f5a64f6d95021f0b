"""Tests for cron schedule parsing and weekly event expansion."""

from __future__ import annotations

from datetime import date

import pytest

from app.constants import CRON_EVENT_COLOR
from app.services.cron_schedule import (
    ALL_DAYS,
    CalendarEvent,
    CronJob,
    cron_weekday,
    expand_cron_events,
    parse_cron_schedule,
    sort_events,
    week_start_for,
)

WEEK_START = date(2026, 10, 11)  # Sunday


# ---------------------------------------------------------------------------
# parse_cron_schedule
# ---------------------------------------------------------------------------


class TestParseCronSchedule:
    def test_daily(self):
        parsed = parse_cron_schedule("0 4 * * *")
        assert parsed is not None
        assert (parsed.minute, parsed.hour) == (0, 4)
        assert parsed.days == ALL_DAYS
        assert parsed.recurrence == "daily"
        assert parsed.time_label == "04:00"

    def test_weekday_list(self):
        parsed = parse_cron_schedule("30 9 * * 1,3,5")
        assert parsed.days == (1, 3, 5)
        assert parsed.recurrence == "weekly"
        assert parsed.time_label == "09:30"

    def test_leading_seconds_field_dropped(self):
        parsed = parse_cron_schedule("0 15 10 * * 1")
        assert (parsed.minute, parsed.hour) == (15, 10)
        assert parsed.days == (1,)

    def test_wildcard_minute_and_hour_read_as_zero(self):
        parsed = parse_cron_schedule("* * * * *")
        assert parsed.time_label == "00:00"

    def test_sunday_as_seven(self):
        assert parse_cron_schedule("0 9 * * 7").days == (0,)

    def test_duplicate_sunday_collapsed(self):
        assert parse_cron_schedule("0 9 * * 0,7").days == (0,)

    def test_out_of_range_days_fall_back_to_every_day(self):
        parsed = parse_cron_schedule("0 9 * * 8,9")
        assert parsed.days == ALL_DAYS
        assert parsed.recurrence == "weekly"

    def test_unparseable_days_fall_back_to_every_day(self):
        assert parse_cron_schedule("0 9 * * MON").days == ALL_DAYS
        assert parse_cron_schedule("0 9 * * MON,TUE").days == ALL_DAYS

    def test_day_range_uses_its_first_day(self):
        parsed = parse_cron_schedule("0 9 * * 1-5")
        assert parsed.days == (1,)
        assert parsed.recurrence == "weekly"

    def test_minute_list_uses_its_first_value(self):
        parsed = parse_cron_schedule("0,30 * * * *")
        assert parsed is not None
        assert parsed.time_label == "00:00"
        assert parsed.days == ALL_DAYS

    def test_hour_range_uses_its_first_value(self):
        assert parse_cron_schedule("15 9-17 * * 1").time_label == "09:15"

    @pytest.mark.parametrize("schedule", ["", "0 4 * *", "*/5 * * * *", "0 */2 * * *", "a b c d e"])
    def test_unsupported_expressions(self, schedule):
        assert parse_cron_schedule(schedule) is None


# ---------------------------------------------------------------------------
# Week helpers
# ---------------------------------------------------------------------------


class TestWeekHelpers:
    @pytest.mark.parametrize(
        "day",
        [date(2026, 10, 11), date(2026, 10, 12), date(2026, 10, 14), date(2026, 10, 17)],
    )
    def test_week_start_is_sunday(self, day):
        assert week_start_for(day) == WEEK_START

    def test_next_sunday_starts_new_week(self):
        assert week_start_for(date(2026, 10, 18)) == date(2026, 10, 18)

    def test_cron_weekday(self):
        assert cron_weekday(date(2026, 10, 11)) == 0
        assert cron_weekday(date(2026, 10, 12)) == 1
        assert cron_weekday(date(2026, 10, 17)) == 6


# ---------------------------------------------------------------------------
# expand_cron_events
# ---------------------------------------------------------------------------


class TestExpandCronEvents:
    def test_daily_job_emits_seven_events(self):
        jobs = [CronJob(id="sync", name="Sync", schedule="0 4 * * *")]
        events = expand_cron_events(jobs, WEEK_START)

        assert [event.date for event in events] == [f"2026-10-{day}" for day in range(11, 18)]
        first = events[0]
        assert first.id == "cron-sync-2026-10-11"
        assert first.type == "cron"
        assert first.time == "04:00"
        assert first.recurrence == "daily"
        assert first.status == "active"
        assert first.color == CRON_EVENT_COLOR

    def test_weekly_job_on_selected_days(self):
        jobs = [CronJob(id="brief", name="Brief", schedule="30 9 * * 1,3,5")]
        events = expand_cron_events(jobs, WEEK_START)

        assert [event.date for event in events] == ["2026-10-12", "2026-10-14", "2026-10-16"]
        assert {event.recurrence for event in events} == {"weekly"}

    def test_disabled_job_marked_disabled(self):
        jobs = [CronJob(id="digest", name="Digest", schedule="0 14 * * 5", enabled=False)]
        events = expand_cron_events(jobs, WEEK_START)

        assert len(events) == 1
        assert events[0].status == "disabled"
        assert events[0].date == "2026-10-16"

    def test_minute_list_job_is_kept(self):
        jobs = [CronJob(id="half", name="Half hourly", schedule="0,30 * * * 1")]
        events = expand_cron_events(jobs, WEEK_START)
        assert [(event.date, event.time) for event in events] == [("2026-10-12", "00:00")]

    def test_unsupported_schedule_skipped(self):
        jobs = [
            CronJob(id="bad", name="Every five", schedule="*/5 * * * *"),
            CronJob(id="ok", name="Nightly", schedule="0 2 * * 0"),
        ]
        events = expand_cron_events(jobs, WEEK_START)
        assert [event.id for event in events] == ["cron-ok-2026-10-11"]


# ---------------------------------------------------------------------------
# sort_events
# ---------------------------------------------------------------------------


def test_sort_events_by_date_then_time():
    events = [
        CalendarEvent(id="c", type="cron", title="C", date="2026-10-12", time="09:00"),
        CalendarEvent(id="b", type="due_date", title="B", date="2026-10-12"),
        CalendarEvent(id="a", type="cron", title="A", date="2026-10-11", time="23:00"),
        CalendarEvent(id="d", type="cron", title="D", date="2026-10-12", time="04:00"),
    ]
    assert [event.id for event in sort_events(events)] == ["a", "b", "d", "c"]
