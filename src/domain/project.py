"""Project domain model."""

from pydantic import BaseModel, ConfigDict, Field

from src.core.config import Constants


class Project(BaseModel):
    """Project grouping tasks."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique project ID")
    name: str = Field(..., min_length=1, description="Project name")
    color: str = Field(default=Constants.DEFAULT_PROJECT_COLOR, description="Display color (hex)")
    emoji: str | None = Field(default=None, description="Optional emoji shown next to the name")
