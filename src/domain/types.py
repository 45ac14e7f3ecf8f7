"""Shared field types for domain models."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator


def as_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


# Calendar-day comparisons ("due today") are made in the user's local time.
LocalDateTime = Annotated[datetime, AfterValidator(as_local_naive)]
