"""Preferences service: UI preferences persisted one key per field."""

import logging
from typing import Any

from pydantic import ValidationError

from src.core.errors import PersistenceError, ValidationFailedError
from src.core.logging import span
from src.core.persistence import PersistencePort
from src.domain.preferences import Preferences


logger = logging.getLogger(__name__)


class PreferencesService:
    """Load and update the user's preferences."""

    def __init__(self, persistence: PersistencePort | None = None) -> None:
        self._persistence = persistence
        self._preferences = self._load()

    def _load(self) -> Preferences:
        if self._persistence is None:
            return Preferences()

        stored = {}
        for name in Preferences.model_fields:
            value = self._persistence.load(name)
            if value is not None:
                stored[name] = value
        try:
            return Preferences.model_validate(stored)
        except ValidationError as e:
            msg = f"Stored preferences are invalid: {e}"
            raise PersistenceError(msg) from e

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    def update(self, **changes: Any) -> Preferences:
        """Change one or more preferences.

        Only the keys that were passed are written back.

        Raises:
            ValidationFailedError: If a key is unknown or a value is invalid
        """
        with span("preferences_service.update"):
            unknown = sorted(set(changes) - set(Preferences.model_fields))
            if unknown:
                msg = f"Unknown preferences: {', '.join(unknown)}"
                raise ValidationFailedError(msg)

            try:
                updated = Preferences.model_validate({**self._preferences.model_dump(), **changes})
            except ValidationError as e:
                raise ValidationFailedError(str(e)) from e

            self._preferences = updated
            if self._persistence is not None:
                dumped = updated.model_dump(mode="json")
                for name in changes:
                    self._persistence.save(name, dumped[name])

            logger.info("Updated preferences: %s", ", ".join(sorted(changes)))
            return updated
