"""Video render state model."""

from typing import Optional
from pydantic import BaseModel, Field, model_validator


class VideoRenderState(BaseModel):
    """State of the final render. One per session."""

    is_generating: bool = Field(default=False, description="A render is in flight")
    progress: int = Field(default=0, description="Cosmetic progress percentage", ge=0, le=100)
    video_reference: Optional[str] = Field(None, description="Rendered video as a data URI")
    error: Optional[str] = Field(None, description="Last render failure message")

    class Config:
        """Pydantic config."""
        frozen = True

    @model_validator(mode="after")
    def _not_generating_with_result(self) -> "VideoRenderState":
        if self.is_generating and self.video_reference:
            raise ValueError("video_reference cannot be set while a render is in flight")
        return self
