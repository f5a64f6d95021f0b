from enum import StrEnum


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class SearchDomain(StrEnum):
    MEMORY = "memory"
    PROJECTS = "projects"
    TASKS = "tasks"
    ACTIVITIES = "activities"


# Order matters: ties in the merged result list keep this order
SEARCH_DOMAIN_ORDER: tuple[SearchDomain, ...] = (
    SearchDomain.MEMORY,
    SearchDomain.PROJECTS,
    SearchDomain.TASKS,
    SearchDomain.ACTIVITIES,
)

DEFAULT_BOARD_NAME = "Mission Control"

# Columns created together with the first board
DEFAULT_COLUMNS: list[dict] = [
    {"name": "Backlog", "position": 0, "color": "#6b7280"},
    {"name": "To Do", "position": 1, "color": "#6130ba"},
    {"name": "In Progress", "position": 2, "color": "#fd4987"},
    {"name": "Done", "position": 3, "color": "#22c55e"},
]

CRON_EVENT_COLOR = "#fd4987"
DUE_DATE_EVENT_COLOR = "#6130ba"
