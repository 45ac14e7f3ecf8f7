from src.services import (
    analytics_service,
    completion_service,
    focus_service,
    planning_service,
    preferences_service,
    task_store,
    view_service,
    workspace_service,
)


__all__ = [
    "analytics_service",
    "completion_service",
    "focus_service",
    "planning_service",
    "preferences_service",
    "task_store",
    "view_service",
    "workspace_service",
]
