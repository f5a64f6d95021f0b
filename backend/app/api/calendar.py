"""Weekly calendar endpoint.

Provides:
- ``GET /calendar?weekOf=YYYY-MM-DD`` -- Cron job runs and project due dates
  for the Sunday-to-Saturday week containing ``weekOf`` (default: this week).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, date, datetime, time, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.constants import DUE_DATE_EVENT_COLOR
from app.database import get_db
from app.models import Project
from app.services.cron_client import CronJobClient
from app.services.cron_schedule import CalendarEvent, expand_cron_events, sort_events, week_start_for
from app.utils.datetime_utils import parse_date_only

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/calendar", tags=["calendar"])


class CalendarResponse(BaseModel):
    week_of: str
    events: list[CalendarEvent]


def _build_cron_client(settings: Settings | None = None) -> CronJobClient:
    """Create a CronJobClient from settings.

    Extracted as a function to allow easy mocking in tests.
    """
    if settings is None:
        settings = get_settings()
    return CronJobClient(settings.CRON_API_URL, timeout=settings.CRON_API_TIMEOUT_SECONDS)


async def _due_date_events(db: AsyncSession, week_start: date) -> list[CalendarEvent]:
    start = datetime.combine(week_start, time.min, tzinfo=UTC)
    end = start + timedelta(days=7)
    result = await db.execute(
        select(Project.id, Project.title, Project.due_date, Project.priority).where(
            Project.due_date >= start, Project.due_date < end
        )
    )
    events = []
    for row in result.fetchall():
        if row.due_date is None:
            continue
        due = row.due_date.astimezone(UTC) if row.due_date.tzinfo else row.due_date
        events.append(
            CalendarEvent(
                id=f"proj-{row.id}",
                type="due_date",
                title=row.title,
                date=due.date().isoformat(),
                time=due.strftime("%H:%M"),
                priority=row.priority,
                status="active",
                color=DUE_DATE_EVENT_COLOR,
            )
        )
    return events


@router.get("")
async def get_calendar(
    db: Annotated[AsyncSession, Depends(get_db)],
    week_of: str | None = Query(None, alias="weekOf"),  # noqa: B008
) -> CalendarResponse:
    """Return the week's events sorted by date, then time."""
    if week_of:
        parsed = parse_date_only(week_of)
        if parsed is None:
            raise HTTPException(status_code=400, detail="Invalid weekOf date")
        week_start = week_start_for(parsed)
    else:
        week_start = week_start_for(datetime.now(UTC).date())

    try:
        due_events, cron_jobs = await asyncio.gather(
            _due_date_events(db, week_start),
            _build_cron_client().fetch_jobs(),
        )
    except Exception:
        logger.exception("Failed to build calendar events")
        raise HTTPException(status_code=500, detail="Failed to fetch calendar events") from None

    events = sort_events([*expand_cron_events(cron_jobs, week_start), *due_events])
    return CalendarResponse(week_of=week_start.isoformat(), events=events)
