"""Tests for the GenerationClient facade."""

import pytest

from conftest import BRAND_COLOR, KOPI_TEXT, FakeGemini, kopi_gemini, run
from promo_video.errors import ValidationError, VideoError
from promo_video.generation import GenerationClient
from promo_video.services.gemini import GenerationResult, GenerationStatus

PLACEHOLDER = "https://placeholder.example/still.png"


def make_client(gemini) -> GenerationClient:
    return GenerationClient(gemini=gemini, placeholder_image=PLACEHOLDER)


def test_analyze_then_expand(kopi_analysis):
    client = make_client(kopi_gemini())

    analysis = run(client.analyze(KOPI_TEXT))
    scenes = run(client.expand_storyboard(analysis, BRAND_COLOR, source_text=KOPI_TEXT))

    assert analysis == kopi_analysis
    assert len(scenes) == 4
    assert all(BRAND_COLOR in scene.visual_prompt for scene in scenes)


@pytest.mark.parametrize("text", ["", "   \n"])
def test_analyze_empty_text_is_local_failure(text):
    gemini = FakeGemini()

    with pytest.raises(ValidationError):
        run(make_client(gemini).analyze(text))
    assert gemini.json_prompts == []


def test_preview_returns_data_uri():
    image = run(make_client(FakeGemini(image_data=b"png")).synthesize_preview("shot"))

    assert image.startswith("data:image/png;base64,")


def test_preview_failure_returns_placeholder():
    image = run(make_client(FakeGemini(image_error="safety block")).synthesize_preview("shot"))

    assert image == PLACEHOLDER


def test_preview_exception_returns_placeholder():
    gemini = FakeGemini()

    async def explode(prompt, aspect_ratio=None):
        raise ConnectionError("network down")

    gemini.generate_image = explode

    assert run(make_client(gemini).synthesize_preview("shot")) == PLACEHOLDER


def test_video_success_returns_data_uri():
    reference = run(make_client(FakeGemini()).synthesize_video("commercial"))

    assert reference.startswith("data:video/mp4;base64,")


def test_video_failure_raises():
    failed = GenerationResult(
        operation_id="op-1",
        status=GenerationStatus.FAILED,
        error_message="quota exhausted",
    )

    with pytest.raises(VideoError, match="quota exhausted"):
        run(make_client(FakeGemini(video_result=failed)).synthesize_video("commercial"))


def test_video_completed_without_bytes_raises():
    empty = GenerationResult(operation_id="op-1", status=GenerationStatus.COMPLETED)

    with pytest.raises(VideoError):
        run(make_client(FakeGemini(video_result=empty)).synthesize_video("commercial"))
