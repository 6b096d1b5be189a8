"""Brand configuration model."""

from typing import Optional
from pydantic import BaseModel, Field


class BrandConfiguration(BaseModel):
    """Brand kit supplied with the marketing copy. Immutable for a run."""

    primary_color: str = Field(default="#8b5cf6", description="Primary brand color")
    secondary_color: str = Field(default="#ffffff", description="Secondary brand color")
    logo_reference: Optional[str] = Field(None, description="Opaque handle to the brand logo")

    class Config:
        """Pydantic config."""
        frozen = True
