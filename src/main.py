"""stuff-engine - personal task-management data engine."""

import logging
from collections.abc import Callable
from datetime import datetime

from src.core.config import Settings, settings
from src.core.logging import configure_logfire
from src.core.persistence import JsonFilePersistence, PersistencePort
from src.services.workspace_service import Workspace


logger = logging.getLogger(__name__)


def create_workspace(
    config: Settings | None = None,
    persistence: PersistencePort | None = None,
    *,
    clock: Callable[[], datetime] = datetime.now,
) -> Workspace:
    """Bootstrap a workspace.

    Configures Logfire, opens the JSON file store under the configured storage
    directory (unless a persistence adapter is passed in) and restores the
    saved state.

    Args:
        config: Settings to use (defaults to the environment-loaded settings)
        persistence: Adapter to use instead of the JSON file store
        clock: Source of the current local time

    Returns:
        Workspace ready for use

    Raises:
        PersistenceError: If the storage directory or stored state is unusable
    """
    config = config or settings
    configure_logfire()

    if persistence is None:
        persistence = JsonFilePersistence(config.storage_path(), prefix=config.storage_key_prefix)

    workspace = Workspace.open(persistence, config=config, clock=clock)
    logger.info(
        "startup_complete",
        extra={
            "tasks": len(workspace.store.tasks),
            "projects": len(workspace.store.projects),
            "tags": len(workspace.store.tags),
        },
    )
    return workspace
