"""Configuration management."""

import os
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from .errors import ConfigurationError

# Load environment variables
load_dotenv()


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    gemini_api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY", ""),
        description="Gemini API key (GEMINI_API_KEY, falls back to API_KEY)"
    )

    # Model settings
    text_model: str = Field(
        default_factory=lambda: os.getenv("PROMO_TEXT_MODEL", "gemini-2.5-flash"),
        description="Model for entity analysis and storyboard expansion"
    )
    image_model: str = Field(
        default_factory=lambda: os.getenv("PROMO_IMAGE_MODEL", "gemini-2.5-flash-image"),
        description="Model for scene preview stills"
    )
    video_model: str = Field(
        default_factory=lambda: os.getenv("PROMO_VIDEO_MODEL", "veo-3.1-fast-generate-preview"),
        description="Veo model for the final render"
    )

    # Generation settings
    aspect_ratio: str = Field(default="16:9", description="Preview and video aspect ratio")
    video_resolution: str = Field(default="720p", description="Veo output resolution")
    poll_interval: float = Field(
        default=5.0,
        description="Seconds between video job status checks",
        gt=0
    )
    preview_placeholder_url: str = Field(
        default="https://picsum.photos/800/450?grayscale",
        description="Image used when a scene preview cannot be generated"
    )

    # Cosmetic progress ticker
    progress_interval: float = Field(default=2.0, description="Seconds between progress ticks", gt=0)
    progress_step: int = Field(default=5, description="Progress added per tick")
    progress_cap: int = Field(default=90, description="Ticker never pushes progress past this")

    class Config:
        """Pydantic config."""
        frozen = False

    def validate_required(self) -> None:
        """Validate that required credentials are set.

        Raises:
            ConfigurationError: If the Gemini API key is missing.
        """
        if not self.gemini_api_key:
            raise ConfigurationError(
                "Gemini API key not set. Set GEMINI_API_KEY (or API_KEY) env var."
            )


# Global config instance
config = Config()
