"""Storyboard agent: entity analysis to a fixed 4-scene storyboard."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError as SchemaMismatch

from ..errors import StoryboardError
from ..models import EntityAnalysis, Scene, SceneType
from .base import BaseAgent

logger = logging.getLogger(__name__)

TARGET_DURATION = 25.0
MIN_SCENE_DURATION = 0.1

# Beat order and default timing
STORYBOARD_PLAN = [
    (SceneType.HOOK, 5.0),
    (SceneType.SOLUTION, 7.0),
    (SceneType.BENEFIT, 8.0),
    (SceneType.CTA, 5.0),
]

URGENCY_CUE = "flashing red overlay, dynamic pop-up text"
CALM_CUE = "soft lighting, slow cinematic pan"
URGENT_CUE = "fast cuts, bright saturation"

DISCOUNT_PATTERN = re.compile(
    r"\b(discount|sale|promo\w*|diskon|potongan)\b|\d+\s*%|\d+\s+off\b",
    re.IGNORECASE,
)

STORYBOARD_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "id": {"type": "INTEGER"},
            "type": {"type": "STRING", "enum": [t.value for t, _ in STORYBOARD_PLAN]},
            "duration": {"type": "NUMBER"},
            "narrative": {"type": "STRING"},
            "visualPrompt": {"type": "STRING"},
            "cameraAngle": {"type": "STRING"},
        },
        "required": ["id", "type", "duration", "narrative", "visualPrompt", "cameraAngle"],
    },
}


def implies_discount(*texts: Optional[str]) -> bool:
    """Whether any of the texts mentions a discount, sale or promo."""
    return any(text and DISCOUNT_PATTERN.search(text) for text in texts)


def mood_cue(mood: str) -> Optional[str]:
    """Visual language required by the marketing mood, if any."""
    normalized = mood.strip().lower()
    if "urgent" in normalized:
        return URGENT_CUE
    if "calm" in normalized:
        return CALM_CUE
    return None


def apply_visual_rules(
    visual_prompt: str,
    analysis: EntityAnalysis,
    brand_color: str,
    source_text: Optional[str] = None,
) -> str:
    """Append whatever the content rules require and the prompt lacks."""
    cues: list[str] = []
    if implies_discount(source_text, analysis.call_to_action):
        cues.append(URGENCY_CUE)
    cue = mood_cue(analysis.mood)
    if cue:
        cues.append(cue)

    prompt = visual_prompt.strip().rstrip(".,")
    lowered = prompt.lower()
    for cue in cues:
        if cue not in lowered:
            prompt = f"{prompt}, {cue}"
    if brand_color.lower() not in lowered:
        prompt = f"{prompt}, {brand_color} brand color accents"
    return prompt


@dataclass
class StoryboardInput:
    """Input data for the storyboard agent."""

    analysis: EntityAnalysis
    brand_color: str
    source_text: Optional[str] = None


class StoryboardAgent(BaseAgent[StoryboardInput, list[Scene]]):
    """Agent for expanding an analysis into the HOOK/SOLUTION/BENEFIT/CTA storyboard.

    The model writes the narrative and visuals; scene ids, beat order,
    total duration and the visual content rules are enforced here.
    """

    @property
    def name(self) -> str:
        return "StoryboardAgent"

    @property
    def response_schema(self) -> dict:
        return STORYBOARD_SCHEMA

    async def run(self, input_data: StoryboardInput) -> list[Scene]:
        """Generate the storyboard.

        Raises:
            StoryboardError: If the response is empty, malformed or not 4 scenes.
        """
        analysis = input_data.analysis
        self._logger.info(
            f"Generating storyboard for '{analysis.product_name}' "
            f"(mood: {analysis.mood}, color: {input_data.brand_color})"
        )

        try:
            data = await self._generate(self._build_prompt(input_data), temperature=0.8)
        except ValueError as e:
            raise StoryboardError(f"No storyboard generated: {e}") from e
        except Exception as e:
            raise StoryboardError(f"Storyboard request failed: {e}") from e

        scenes = self._parse_scenes(data)
        scenes = self._adjust_durations(scenes, TARGET_DURATION)

        for scene in scenes:
            scene.visual_prompt = apply_visual_rules(
                scene.visual_prompt,
                analysis,
                input_data.brand_color,
                input_data.source_text,
            )

        self._logger.info(f"Generated {len(scenes)} scenes")
        return scenes

    def _build_prompt(self, input_data: StoryboardInput) -> str:
        """Build the storyboard prompt."""
        analysis = input_data.analysis
        color = input_data.brand_color
        features = ", ".join(analysis.features)
        return "\n".join([
            f"Create a strict 4-scene storyboard for a {TARGET_DURATION:g}-second promotional video.",
            "",
            "Context:",
            f"- Product: {analysis.product_name}",
            f"- Features: {features}",
            f"- Target: {analysis.target_audience}",
            f"- Mood: {analysis.mood}",
            f"- Brand Color: {color}",
            "",
            f"Structure (must sum to approx {TARGET_DURATION:g}s):",
            f"1. HOOK (approx 5s): Visualizing the problem or need ({analysis.target_audience}).",
            f"2. SOLUTION (approx 7s): Introducing {analysis.product_name} clearly.",
            f"3. BENEFIT (approx 8s): Visual proof of features ({features}).",
            f"4. CTA (approx 5s): Final driver for '{analysis.call_to_action}'.",
            "",
            "Visual Instruction Rules:",
            f'- IF the text implies "Discount", "Sale" or "Promo", the visual prompt MUST include "{URGENCY_CUE}".',
            f'- IF mood is "Calm", the visual prompt MUST include "{CALM_CUE}".',
            f'- IF mood is "Urgent", the visual prompt MUST include "{URGENT_CUE}".',
            f"- ALWAYS mention the brand color ({color}) in the visual elements (props, background or lighting).",
            "",
            "Return a JSON array.",
        ])

    def _parse_scenes(self, data: Any) -> list[Scene]:
        """Validate the raw scene list and normalize ids and beat order.

        Raises:
            StoryboardError: If the payload is not exactly 4 usable scenes.
        """
        scenes_data = data.get("scenes", data) if isinstance(data, dict) else data

        if not isinstance(scenes_data, list):
            raise StoryboardError("Response does not contain a scenes array")
        if len(scenes_data) != len(STORYBOARD_PLAN):
            raise StoryboardError(
                f"Expected {len(STORYBOARD_PLAN)} scenes, got {len(scenes_data)}"
            )
        if not all(isinstance(item, dict) for item in scenes_data):
            raise StoryboardError("Scene entries must be JSON objects")

        # Respect the model's ordering only when its ids are a clean 1-4
        ids = [item.get("id") for item in scenes_data]
        if sorted(i for i in ids if isinstance(i, int)) == [1, 2, 3, 4]:
            scenes_data = sorted(scenes_data, key=lambda item: item["id"])

        scenes: list[Scene] = []
        for index, (scene_data, (scene_type, default_duration)) in enumerate(
            zip(scenes_data, STORYBOARD_PLAN)
        ):
            if scene_data.get("type") != scene_type.value:
                self._logger.warning(
                    f"Scene {index + 1} typed {scene_data.get('type')!r}, using {scene_type.value}"
                )

            visual_prompt = str(scene_data.get("visualPrompt") or "")
            if not visual_prompt.strip():
                raise StoryboardError(f"Scene {index + 1} has no visual prompt")

            try:
                duration = float(scene_data.get("duration") or 0)
            except (TypeError, ValueError):
                duration = 0.0

            try:
                scenes.append(Scene(
                    id=index + 1,
                    type=scene_type,
                    duration_seconds=duration if duration > 0 else default_duration,
                    narrative=scene_data.get("narrative") or "",
                    visual_prompt=visual_prompt,
                    camera_angle=scene_data.get("cameraAngle") or "",
                ))
            except SchemaMismatch as e:
                raise StoryboardError(f"Malformed scene {index + 1}: {e}") from e

        return scenes

    def _adjust_durations(
        self, scenes: list[Scene], target_duration: float
    ) -> list[Scene]:
        """Scale scene durations so they sum to the target duration."""
        current_total = sum(scene.duration_seconds for scene in scenes)

        # Scale durations proportionally
        scale_factor = target_duration / current_total

        for scene in scenes:
            scene.duration_seconds = max(
                MIN_SCENE_DURATION, round(scene.duration_seconds * scale_factor, 1)
            )

        # Absorb rounding and clamping in the longest scene
        adjusted_total = sum(scene.duration_seconds for scene in scenes)
        if adjusted_total != target_duration:
            diff = target_duration - adjusted_total
            longest = max(scenes, key=lambda scene: scene.duration_seconds)
            longest.duration_seconds = round(longest.duration_seconds + diff, 1)

        return scenes
