"""Generation client: the four provider operations behind typed domain values."""

import logging
from typing import List, Optional

from .agents import AnalysisAgent, StoryboardAgent, StoryboardInput
from .config import config
from .errors import ValidationError, VideoError
from .models import EntityAnalysis, Scene
from .services.gemini import GeminiClient, GenerationStatus, to_data_uri

logger = logging.getLogger(__name__)


class GenerationClient:
    """Entity analysis, storyboard expansion, preview stills and video synthesis.

    Carries the credential through its GeminiClient; constructing one without
    a credential raises ConfigurationError. No operation retries on its own.
    """

    def __init__(
        self,
        gemini: Optional[GeminiClient] = None,
        placeholder_image: Optional[str] = None,
    ) -> None:
        """Initialize the generation client.

        Args:
            gemini: Provider wrapper. Created from config if not provided.
            placeholder_image: Image reference returned when a preview fails.
                Defaults to config.preview_placeholder_url.
        """
        self._gemini = gemini or GeminiClient()
        self._placeholder_image = placeholder_image or config.preview_placeholder_url
        self._analysis_agent = AnalysisAgent(client=self._gemini)
        self._storyboard_agent = StoryboardAgent(client=self._gemini)

    @property
    def placeholder_image(self) -> str:
        return self._placeholder_image

    async def analyze(self, text: str) -> EntityAnalysis:
        """Extract entities from marketing copy.

        Raises:
            ValidationError: If `text` is empty. No request is made.
            AnalysisError: If the provider returns no usable analysis.
        """
        if not text or not text.strip():
            raise ValidationError("Marketing text cannot be empty")
        return await self._analysis_agent.run(text)

    async def expand_storyboard(
        self,
        analysis: EntityAnalysis,
        brand_color: str,
        source_text: Optional[str] = None,
    ) -> List[Scene]:
        """Expand an analysis into the 4-scene storyboard.

        Raises:
            StoryboardError: If the provider returns a malformed or short storyboard.
        """
        return await self._storyboard_agent.run(
            StoryboardInput(
                analysis=analysis,
                brand_color=brand_color,
                source_text=source_text,
            )
        )

    async def synthesize_preview(self, visual_prompt: str) -> str:
        """Render a preview still. Falls back to the placeholder on any failure."""
        try:
            result = await self._gemini.generate_image(visual_prompt)
        except Exception as e:
            logger.warning(f"Preview failed ({e}), using placeholder")
            return self._placeholder_image

        if result.data_uri:
            return result.data_uri

        logger.warning(f"Preview failed ({result.error_message}), using placeholder")
        return self._placeholder_image

    async def synthesize_video(self, full_prompt: str) -> str:
        """Render the final video and return it as a data URI.

        Raises:
            VideoError: If the job fails or yields no usable video.
        """
        if not full_prompt or not full_prompt.strip():
            raise VideoError("Video prompt cannot be empty")

        result = await self._gemini.generate_video(full_prompt)

        if result.status != GenerationStatus.COMPLETED:
            raise VideoError(result.error_message or f"Video generation {result.status.value}")
        if not result.video:
            raise VideoError("Video generation returned an empty asset")

        logger.info(f"Video {result.operation_id} ready ({len(result.video)} bytes)")
        return to_data_uri(result.video, result.mime_type)
