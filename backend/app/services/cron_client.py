"""Best-effort client for the external cron job listing API.

The calendar must render even when the scheduler is down, so any failure
(timeout, HTTP error, unexpected payload) falls back to a small fixed list.

Usage::

    client = CronJobClient(url, timeout=1.5)
    jobs = await client.fetch_jobs()
"""

from __future__ import annotations

import logging

import httpx

from app.services.cron_schedule import CronJob

logger = logging.getLogger(__name__)

FALLBACK_CRON_JOBS: tuple[CronJob, ...] = (
    CronJob(id="mock-1", name="Sync Kierra TikTok Videos", schedule="0 4 * * *", enabled=True),
    CronJob(id="mock-2", name="Publish Fast Track Daily Brief", schedule="30 9 * * 1,3,5", enabled=True),
    CronJob(id="mock-3", name="Weekly Metrics Digest", schedule="0 14 * * 5", enabled=False),
)


class CronSourceError(Exception):
    """Raised when the cron listing cannot be fetched or understood."""


def _first_present(raw: dict, *keys: str):
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def normalize_job(raw: dict, index: int) -> CronJob:
    """Map one loosely shaped job object onto :class:`CronJob`."""
    job_id = _first_present(raw, "id", "jobId")
    name = _first_present(raw, "name", "title")
    schedule = _first_present(raw, "schedule", "cron", "expression")
    enabled = raw.get("enabled")
    description = raw.get("description")
    return CronJob(
        id=str(job_id if job_id is not None else index),
        name=str(name if name is not None else "Scheduled job"),
        schedule=str(schedule if schedule is not None else ""),
        enabled=True if enabled is None else bool(enabled),
        description=description if isinstance(description, str) else None,
    )


def parse_jobs_payload(payload: object) -> list[CronJob]:
    """Accept a bare list or an object with ``jobs`` / ``cronJobs``."""
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        items = _first_present(payload, "jobs", "cronJobs") or []
    else:
        raise CronSourceError(f"Unexpected cron payload type: {type(payload).__name__}")

    if not isinstance(items, list):
        raise CronSourceError("Cron payload does not contain a job list")
    return [normalize_job(item, index) for index, item in enumerate(items) if isinstance(item, dict)]


class CronJobClient:
    """Fetch cron jobs over HTTP with a short timeout.

    Args:
        url: Endpoint returning the job list as JSON.
        timeout: Seconds before the request is abandoned.
        transport: Optional httpx transport (tests inject a mock transport).
    """

    def __init__(
        self,
        url: str,
        timeout: float = 1.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def fetch_jobs(self) -> list[CronJob]:
        """Return the live job list, or the fallback list on any failure."""
        try:
            return await self._fetch()
        except (httpx.HTTPError, ValueError, CronSourceError) as exc:
            logger.warning("Falling back to mock cron data: %s", exc)
            return list(FALLBACK_CRON_JOBS)

    async def _fetch(self) -> list[CronJob]:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(self._url, headers={"Cache-Control": "no-store"})
            response.raise_for_status()
            return parse_jobs_payload(response.json())
