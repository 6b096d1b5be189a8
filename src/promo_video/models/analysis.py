"""Entity analysis model."""

from typing import List
from pydantic import BaseModel, Field

AUDIO_MIX_STANDARD = "TTS: 100%, Music: 30%, SFX: 10%"


class EntityAnalysis(BaseModel):
    """Structured entities extracted from marketing copy.

    Accepts the provider's camelCase keys as aliases.
    """

    product_name: str = Field(..., alias="productName", description="Main product or service")
    features: List[str] = Field(default_factory=list, description="Product attributes, in order")
    target_audience: str = Field(..., alias="targetAudience", description="Audience or usage situation")
    call_to_action: str = Field(..., alias="cta", description="Action and incentive")
    mood: str = Field(..., alias="marketingMood", description="Marketing mood, e.g. Urgent or Calm")
    audio_mix_ratio: str = Field(
        default=AUDIO_MIX_STANDARD,
        alias="suggestedAudioRatio",
        description="TTS/music/SFX mix"
    )

    class Config:
        """Pydantic config."""
        frozen = True
        populate_by_name = True
