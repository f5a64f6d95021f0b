"""Expand cron schedules into calendar events for one week.

Only the subset of cron needed for a weekly calendar is understood: a fixed
minute and hour plus an optional day-of-week list. Day-of-month and month
fields are ignored. Numeric fields use their leading integer, so lists and
ranges collapse to their first value (``"0,30"`` is minute 0, ``"1-5"`` is
Monday).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta

from pydantic import BaseModel

from app.constants import CRON_EVENT_COLOR

ALL_DAYS: tuple[int, ...] = (0, 1, 2, 3, 4, 5, 6)  # Sunday = 0


class CronJob(BaseModel):
    id: str
    name: str
    schedule: str
    enabled: bool = True
    description: str | None = None


class CalendarEvent(BaseModel):
    id: str
    type: str  # "cron" | "due_date"
    title: str
    date: str  # YYYY-MM-DD
    time: str | None = None  # HH:MM
    recurrence: str | None = None  # "daily" | "weekly"
    priority: str | None = None
    status: str = "active"  # "active" | "disabled"
    color: str | None = None


@dataclass(frozen=True)
class CronSchedule:
    minute: int
    hour: int
    days: tuple[int, ...]
    recurrence: str

    @property
    def time_label(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _leading_int(raw: str) -> int | None:
    """Integer prefix of ``raw`` (``"0,30"`` -> 0, ``"1-5"`` -> 1), or None."""
    match = _LEADING_INT_RE.match(raw)
    return int(match.group(1)) if match else None


def _parse_int(raw: str) -> int | None:
    if raw == "*":
        return 0
    return _leading_int(raw)


def _parse_days(raw: str) -> tuple[int, ...]:
    if raw == "*" or not any(ch.isdigit() for ch in raw):
        return ALL_DAYS

    days: list[int] = []
    for item in raw.split(","):
        value = _leading_int(item)
        if value is None:
            continue
        if value == 7:
            value = 0
        if 0 <= value <= 6 and value not in days:
            days.append(value)
    return tuple(days) if days else ALL_DAYS


def parse_cron_schedule(schedule: str) -> CronSchedule | None:
    """Parse a 5-field (or 6-field, leading seconds) cron expression.

    Returns None if the expression has too few fields or a non-numeric
    minute or hour.
    """
    parts = schedule.split()
    if len(parts) == 6:
        parts = parts[1:]
    if len(parts) < 5:
        return None

    minute_raw, hour_raw, _, _, day_of_week_raw = parts[:5]
    minute = _parse_int(minute_raw)
    hour = _parse_int(hour_raw)
    if minute is None or hour is None:
        return None

    return CronSchedule(
        minute=minute,
        hour=hour,
        days=_parse_days(day_of_week_raw),
        recurrence="daily" if day_of_week_raw == "*" else "weekly",
    )


def week_start_for(day: date) -> date:
    """Return the Sunday starting the week that contains ``day``."""
    # date.weekday(): Monday = 0 ... Sunday = 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def cron_weekday(day: date) -> int:
    """Day of week in cron numbering (Sunday = 0)."""
    return (day.weekday() + 1) % 7


def expand_cron_events(jobs: list[CronJob], week_start: date) -> list[CalendarEvent]:
    """Emit one event per job per matching day in the 7-day window."""
    events: list[CalendarEvent] = []
    for job in jobs:
        parsed = parse_cron_schedule(job.schedule)
        if parsed is None:
            continue
        for offset in range(7):
            day = week_start + timedelta(days=offset)
            if cron_weekday(day) not in parsed.days:
                continue
            events.append(
                CalendarEvent(
                    id=f"cron-{job.id}-{day.isoformat()}",
                    type="cron",
                    title=job.name,
                    date=day.isoformat(),
                    time=parsed.time_label,
                    recurrence=parsed.recurrence,
                    status="active" if job.enabled else "disabled",
                    color=CRON_EVENT_COLOR,
                )
            )
    return events


def sort_events(events: list[CalendarEvent]) -> list[CalendarEvent]:
    """Order events by date, then time (untimed first)."""
    return sorted(events, key=lambda event: (event.date, event.time or ""))
