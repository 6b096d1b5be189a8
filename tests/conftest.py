"""Shared fakes and fixtures."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from promo_video.models import BrandConfiguration, EntityAnalysis, Scene, SceneType, Session
from promo_video.services.gemini import GenerationResult, GenerationStatus, ImageResult

KOPI_TEXT = "Jual kopi robusta dengan rasa coklat, untuk sarapan cepat, beli sekarang diskon 20%."
BRAND_COLOR = "#8b5cf6"

KOPI_ANALYSIS = {
    "productName": "kopi robusta",
    "features": ["rasa coklat"],
    "targetAudience": "sarapan cepat",
    "cta": "beli sekarang diskon 20%",
    "marketingMood": "Urgent",
    "suggestedAudioRatio": "TTS: 100%, Music: 30%, SFX: 10%",
}

KOPI_STORYBOARD = [
    {"id": 1, "type": "HOOK", "duration": 5, "narrative": "Groggy morning rush",
     "visualPrompt": "Office worker yawning at a kitchen table at dawn", "cameraAngle": "Close-up"},
    {"id": 2, "type": "SOLUTION", "duration": 7, "narrative": "Kopi robusta arrives",
     "visualPrompt": "Steaming cup of robusta coffee on a wooden counter", "cameraAngle": "Medium shot"},
    {"id": 3, "type": "BENEFIT", "duration": 8, "narrative": "Chocolate notes",
     "visualPrompt": "Chocolate swirl pouring into dark coffee", "cameraAngle": "Macro"},
    {"id": 4, "type": "CTA", "duration": 5, "narrative": "Beli sekarang",
     "visualPrompt": "Coffee bag with 20% off badge", "cameraAngle": "Wide shot"},
]


class FakeGemini:
    """Stands in for GeminiClient at the provider boundary."""

    def __init__(
        self,
        json_responses=None,
        image_data=b"\x89PNG-fake",
        image_error=None,
        video_result=None,
    ):
        self.json_responses = list(json_responses or [])
        self.json_prompts = []
        self.image_data = image_data
        self.image_error = image_error
        self.image_prompts = []
        self.on_image = None
        self.video_result = video_result
        self.video_prompts = []
        self.video_gate = None

    async def generate_json(self, prompt, response_schema, temperature=0.7):
        self.json_prompts.append(prompt)
        response = self.json_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def generate_image(self, prompt, aspect_ratio=None):
        self.image_prompts.append(prompt)
        if self.on_image:
            self.on_image(prompt)
        if self.image_error:
            return ImageResult(prompt=prompt, error_message=self.image_error)
        return ImageResult(prompt=prompt, data=self.image_data)

    async def generate_video(self, prompt, aspect_ratio=None, resolution=None):
        self.video_prompts.append(prompt)
        if self.video_gate is not None:
            await self.video_gate.wait()
        if self.video_result is not None:
            return self.video_result
        return GenerationResult(
            operation_id="op-1",
            status=GenerationStatus.COMPLETED,
            video=b"mp4-bytes",
        )


def kopi_gemini(**kwargs) -> FakeGemini:
    """FakeGemini primed with the kopi robusta analysis and storyboard."""
    return FakeGemini(
        json_responses=[json.dumps(KOPI_ANALYSIS), json.dumps(KOPI_STORYBOARD)],
        **kwargs,
    )


def make_scenes():
    plan = [(SceneType.HOOK, 5.0), (SceneType.SOLUTION, 7.0), (SceneType.BENEFIT, 8.0), (SceneType.CTA, 5.0)]
    return [
        Scene(
            id=index + 1,
            type=scene_type,
            duration_seconds=duration,
            narrative=f"beat {index + 1}",
            visual_prompt=f"shot {index + 1}, {BRAND_COLOR}",
            camera_angle="Wide",
        )
        for index, (scene_type, duration) in enumerate(plan)
    ]


def make_ready_session() -> Session:
    session = Session(source_text=KOPI_TEXT, brand=BrandConfiguration(primary_color=BRAND_COLOR))
    session.set_analysis(EntityAnalysis.model_validate(KOPI_ANALYSIS))
    session.set_scenes(make_scenes())
    return session


@pytest.fixture
def kopi_analysis() -> EntityAnalysis:
    return EntityAnalysis.model_validate(KOPI_ANALYSIS)


@pytest.fixture
def brand() -> BrandConfiguration:
    return BrandConfiguration(primary_color=BRAND_COLOR)


# google-genai SDK fakes for GeminiClient tests

class FakeAioModels:
    def __init__(self, content_responses=None, video_operation=None):
        self.content_responses = list(content_responses or [])
        self.content_calls = []
        self.video_operation = video_operation
        self.video_calls = []

    async def generate_content(self, model, contents, config=None):
        self.content_calls.append({"model": model, "contents": contents, "config": config})
        response = self.content_responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def generate_videos(self, model, prompt, config=None):
        self.video_calls.append({"model": model, "prompt": prompt, "config": config})
        return self.video_operation


class FakeAioOperations:
    def __init__(self, sequence=None):
        self.sequence = list(sequence or [])
        self.calls = 0

    async def get(self, operation):
        self.calls += 1
        return self.sequence.pop(0)


class FakeGenaiClient:
    def __init__(self, content_responses=None, video_operation=None, operations=None):
        self.aio = SimpleNamespace(
            models=FakeAioModels(content_responses, video_operation),
            operations=FakeAioOperations(operations),
        )


def text_response(text):
    return SimpleNamespace(text=text, candidates=[])


def image_response(data, mime_type="image/png"):
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type=mime_type), text=None)
    return SimpleNamespace(text=None, candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def video_operation(done, uri=None, video_bytes=None, error=None, name="operations/veo-123"):
    response = None
    if uri or video_bytes:
        video = SimpleNamespace(uri=uri, video_bytes=video_bytes, mime_type="video/mp4")
        response = SimpleNamespace(generated_videos=[SimpleNamespace(video=video)])
    return SimpleNamespace(name=name, done=done, error=error, response=response)


def run(coro):
    return asyncio.run(coro)
