"""Tag domain model and color palette."""

import random

from pydantic import BaseModel, ConfigDict, Field


TAG_PALETTE: tuple[str, ...] = (
    "#FF3B30",
    "#FF9500",
    "#FFCC00",
    "#34C759",
    "#00C7BE",
    "#30B0C7",
    "#007AFF",
    "#5856D6",
    "#AF52DE",
    "#FF2D55",
)


def pick_tag_color(rng: random.Random) -> str:
    """Pick a palette color uniformly at random (no reuse tracking)."""
    return rng.choice(TAG_PALETTE)


class Tag(BaseModel):
    """Tag referenced from tasks by name."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique tag ID")
    name: str = Field(..., min_length=1, description="Tag name (unique, case-insensitive)")
    color: str = Field(..., description="Display color (hex)")

    def matches(self, name: str) -> bool:
        """Return True if `name` refers to this tag (case-insensitive)."""
        return self.name.casefold() == name.strip().casefold()
