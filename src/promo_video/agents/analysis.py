"""Analysis agent: marketing copy to structured entities."""

import logging

from pydantic import ValidationError as SchemaMismatch

from ..errors import AnalysisError, ValidationError
from ..models import AUDIO_MIX_STANDARD, EntityAnalysis
from .base import BaseAgent

logger = logging.getLogger(__name__)

ANALYSIS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "productName": {"type": "STRING"},
        "features": {"type": "ARRAY", "items": {"type": "STRING"}},
        "targetAudience": {"type": "STRING"},
        "cta": {"type": "STRING"},
        "marketingMood": {"type": "STRING"},
        "suggestedAudioRatio": {"type": "STRING"},
    },
    "required": ["productName", "features", "targetAudience", "cta", "marketingMood"],
}


class AnalysisAgent(BaseAgent[str, EntityAnalysis]):
    """Extracts product, features, audience and call to action from copy.

    Also classifies the marketing mood. The audio mix is pinned to the
    technical standard regardless of what the model suggests.
    """

    @property
    def name(self) -> str:
        return "AnalysisAgent"

    @property
    def response_schema(self) -> dict:
        return ANALYSIS_SCHEMA

    async def run(self, input_data: str) -> EntityAnalysis:
        """Analyze marketing copy.

        Raises:
            ValidationError: If the text is empty.
            AnalysisError: If the model returns no usable analysis.
        """
        if not input_data or not input_data.strip():
            raise ValidationError("Marketing text cannot be empty")

        self._logger.info(f"Analyzing marketing text ({len(input_data)} chars)")

        try:
            data = await self._generate(self._build_prompt(input_data), temperature=0.2)
        except ValueError as e:
            raise AnalysisError(f"No analysis generated: {e}") from e
        except Exception as e:
            raise AnalysisError(f"Analysis request failed: {e}") from e

        if not isinstance(data, dict):
            raise AnalysisError("Analysis response is not a JSON object")

        data["suggestedAudioRatio"] = AUDIO_MIX_STANDARD
        try:
            analysis = EntityAnalysis.model_validate(data)
        except SchemaMismatch as e:
            raise AnalysisError(f"Malformed analysis: {e}") from e

        self._logger.info(
            f"Detected product '{analysis.product_name}' "
            f"({len(analysis.features)} features, mood {analysis.mood})"
        )
        return analysis

    def _build_prompt(self, text: str) -> str:
        """Build the extraction prompt."""
        return "\n".join([
            "Act as a senior marketing analyst. Parse the following promotional text "
            "into a structured plan for a short promotional video.",
            f'Input Text: "{text.strip()}"',
            "",
            "Extraction Rules:",
            "1. PRODUCT: Identify the main item or service.",
            '2. FEATURES: Extract specific attributes (e.g., "rasa coklat").',
            '3. TARGET_SITUATION: Identify the context or audience (e.g., "sarapan cepat").',
            '4. CTA_INCENTIVE: Identify the action and deal (e.g., "beli sekarang diskon 20%").',
            "",
            "Analysis Rules:",
            "- Determine 'marketingMood' from keywords (e.g., 'Promo' -> 'Urgent', 'Health' -> 'Calm').",
            f"- Set 'suggestedAudioRatio' to \"{AUDIO_MIX_STANDARD}\".",
            "",
            "Return JSON.",
        ])
