"""Mission Control REST API package.

Sub-modules expose FastAPI routers for each area of the dashboard:
- board: kanban board and columns
- projects / tasks: card and checklist CRUD
- activity: activity log
- agent_status: agent presence heartbeat
- calendar: weekly cron and due-date events
- search: federated free-text search
"""
