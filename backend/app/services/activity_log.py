"""Thin helpers for writing activity log entries.

Activity logging never fails the caller: errors are logged and dropped.
"""

import asyncio
import logging
from datetime import datetime

from app.database import async_session_factory
from app.models import Activity

logger = logging.getLogger(__name__)

# Strong references to in-flight background writes so they are not collected early
_background_tasks: set[asyncio.Task] = set()


async def log_activity(
    action: str,
    category: str,
    title: str,
    description: str | None = None,
    metadata: dict | None = None,
    session_id: str | None = None,
    status: str = "success",
    timestamp: datetime | None = None,
) -> None:
    """Write one row to activities using a fresh session."""
    try:
        async with async_session_factory() as session:
            entry = Activity(
                action=action,
                category=category,
                title=title,
                description=description,
                metadata_=metadata,
                session_id=session_id,
                status=status,
            )
            if timestamp is not None:
                entry.timestamp = timestamp
            session.add(entry)
            await session.commit()
    except Exception:
        logger.exception("Failed to log activity: %s/%s", category, action)


def spawn_activity_log(**kwargs) -> asyncio.Task:
    """Schedule :func:`log_activity` in the background and return immediately."""
    task = asyncio.create_task(log_activity(**kwargs))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task
