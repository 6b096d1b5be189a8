"""Scene data model."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class SceneType(str, Enum):
    """Storyboard beat, in playback order."""
    HOOK = "HOOK"
    SOLUTION = "SOLUTION"
    BENEFIT = "BENEFIT"
    CTA = "CTA"


class Scene(BaseModel):
    """Represents a single scene in the storyboard."""

    id: int = Field(..., description="Scene ordinal", ge=1, le=4)
    type: SceneType = Field(..., description="Storyboard beat")
    duration_seconds: float = Field(..., alias="duration", description="Scene duration in seconds", gt=0)
    narrative: str = Field(default="", description="What happens in the scene")
    visual_prompt: str = Field(..., alias="visualPrompt", description="Image/video generation prompt")
    camera_angle: str = Field(default="", alias="cameraAngle", description="Camera framing")
    preview_image: Optional[str] = Field(None, description="Preview still (data URI or placeholder URL)")

    class Config:
        """Pydantic config."""
        frozen = False
        populate_by_name = True
