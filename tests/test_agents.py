"""Tests for the analysis and storyboard agents."""

import json

import pytest

from conftest import BRAND_COLOR, KOPI_ANALYSIS, KOPI_STORYBOARD, KOPI_TEXT, FakeGemini, run
from promo_video.agents import AnalysisAgent, StoryboardAgent, StoryboardInput
from promo_video.agents.storyboard import (
    CALM_CUE,
    URGENCY_CUE,
    URGENT_CUE,
    apply_visual_rules,
    implies_discount,
)
from promo_video.errors import AnalysisError, StoryboardError, ValidationError
from promo_video.models import AUDIO_MIX_STANDARD, EntityAnalysis, SceneType


def calm_analysis() -> EntityAnalysis:
    data = dict(KOPI_ANALYSIS, marketingMood="Calm", cta="Try it today")
    return EntityAnalysis.model_validate(data)


class TestAnalysisAgent:

    def test_parses_entities(self):
        gemini = FakeGemini(json_responses=[json.dumps(KOPI_ANALYSIS)])

        analysis = run(AnalysisAgent(client=gemini).run(KOPI_TEXT))

        assert analysis.product_name == "kopi robusta"
        assert analysis.target_audience == "sarapan cepat"
        assert KOPI_TEXT in gemini.json_prompts[0]

    def test_audio_mix_pinned_to_standard(self):
        data = dict(KOPI_ANALYSIS, suggestedAudioRatio="Music: 100%")
        gemini = FakeGemini(json_responses=[json.dumps(data)])

        analysis = run(AnalysisAgent(client=gemini).run(KOPI_TEXT))

        assert analysis.audio_mix_ratio == AUDIO_MIX_STANDARD

    def test_strips_markdown_fences(self):
        fenced = "```json\n" + json.dumps(KOPI_ANALYSIS) + "\n```"
        gemini = FakeGemini(json_responses=[fenced])

        analysis = run(AnalysisAgent(client=gemini).run(KOPI_TEXT))

        assert analysis.mood == "Urgent"

    @pytest.mark.parametrize("response", ["", "not json", "[1, 2]", json.dumps({"productName": "x"})])
    def test_unusable_payload_raises(self, response):
        gemini = FakeGemini(json_responses=[response])

        with pytest.raises(AnalysisError):
            run(AnalysisAgent(client=gemini).run(KOPI_TEXT))

    def test_transport_error_raises_analysis_error(self):
        gemini = FakeGemini(json_responses=[ConnectionError("connection reset by peer")])

        with pytest.raises(AnalysisError, match="connection reset"):
            run(AnalysisAgent(client=gemini).run(KOPI_TEXT))

    def test_empty_text_never_calls_provider(self):
        gemini = FakeGemini()

        with pytest.raises(ValidationError):
            run(AnalysisAgent(client=gemini).run("   "))
        assert gemini.json_prompts == []


class TestStoryboardAgent:

    def _run(self, scenes, analysis, source_text=KOPI_TEXT):
        gemini = FakeGemini(json_responses=[json.dumps(scenes)])
        agent = StoryboardAgent(client=gemini)
        return run(agent.run(StoryboardInput(analysis, BRAND_COLOR, source_text))), gemini

    def test_four_canonical_scenes(self, kopi_analysis):
        scenes, gemini = self._run(KOPI_STORYBOARD, kopi_analysis)

        assert [scene.id for scene in scenes] == [1, 2, 3, 4]
        assert [scene.type for scene in scenes] == [
            SceneType.HOOK, SceneType.SOLUTION, SceneType.BENEFIT, SceneType.CTA
        ]
        assert [scene.duration_seconds for scene in scenes] == [5.0, 7.0, 8.0, 5.0]
        assert BRAND_COLOR in gemini.json_prompts[0]

    def test_urgent_discount_rules_on_every_scene(self, kopi_analysis):
        scenes, _ = self._run(KOPI_STORYBOARD, kopi_analysis)

        for scene in scenes:
            assert BRAND_COLOR in scene.visual_prompt
            assert URGENT_CUE in scene.visual_prompt
            assert URGENCY_CUE in scene.visual_prompt

    def test_calm_rules_without_discount(self):
        scenes, _ = self._run(KOPI_STORYBOARD, calm_analysis(), source_text="Herbal tea for quiet evenings")

        for scene in scenes:
            assert CALM_CUE in scene.visual_prompt
            assert URGENT_CUE not in scene.visual_prompt
            assert URGENCY_CUE not in scene.visual_prompt

    def test_ordinary_off_gets_no_urgency_cue(self):
        quiet = KOPI_STORYBOARD[:3] + [dict(KOPI_STORYBOARD[3], visualPrompt="Headphones on a quiet desk")]

        scenes, _ = self._run(quiet, calm_analysis(), source_text="Headphones that switch off the noise so you can relax.")

        for scene in scenes:
            assert URGENCY_CUE not in scene.visual_prompt
            assert CALM_CUE in scene.visual_prompt

    def test_durations_rescaled_to_target(self, kopi_analysis):
        even = [dict(scene, duration=4) for scene in KOPI_STORYBOARD]

        scenes, _ = self._run(even, kopi_analysis)

        assert sum(scene.duration_seconds for scene in scenes) == pytest.approx(25.0, abs=0.05)

    def test_missing_durations_use_beat_defaults(self, kopi_analysis):
        no_durations = [{k: v for k, v in scene.items() if k != "duration"} for scene in KOPI_STORYBOARD]

        scenes, _ = self._run(no_durations, kopi_analysis)

        assert [scene.duration_seconds for scene in scenes] == [5.0, 7.0, 8.0, 5.0]

    def test_out_of_order_ids_sorted(self, kopi_analysis):
        shuffled = [KOPI_STORYBOARD[2], KOPI_STORYBOARD[0], KOPI_STORYBOARD[3], KOPI_STORYBOARD[1]]

        scenes, _ = self._run(shuffled, kopi_analysis)

        assert scenes[0].narrative == "Groggy morning rush"
        assert scenes[3].type == SceneType.CTA

    def test_wrapped_scenes_object_accepted(self, kopi_analysis):
        scenes, _ = self._run({"scenes": KOPI_STORYBOARD}, kopi_analysis)

        assert len(scenes) == 4

    @pytest.mark.parametrize("payload", [
        KOPI_STORYBOARD[:3],
        KOPI_STORYBOARD + [KOPI_STORYBOARD[0]],
        {"storyboard": "none"},
        [dict(KOPI_STORYBOARD[0], visualPrompt="")] + KOPI_STORYBOARD[1:],
    ])
    def test_malformed_storyboard_raises(self, kopi_analysis, payload):
        with pytest.raises(StoryboardError):
            self._run(payload, kopi_analysis)

    def test_empty_response_raises(self, kopi_analysis):
        gemini = FakeGemini(json_responses=[""])

        with pytest.raises(StoryboardError):
            run(StoryboardAgent(client=gemini).run(StoryboardInput(kopi_analysis, BRAND_COLOR)))

    def test_transport_error_raises_storyboard_error(self, kopi_analysis):
        gemini = FakeGemini(json_responses=[TimeoutError("read timed out")])

        with pytest.raises(StoryboardError, match="timed out"):
            run(StoryboardAgent(client=gemini).run(StoryboardInput(kopi_analysis, BRAND_COLOR)))

    def test_skewed_durations_stay_positive(self, kopi_analysis):
        skewed = [dict(scene, duration=d) for scene, d in zip(KOPI_STORYBOARD, [50, 0.1, 0.1, 0.1])]

        scenes, _ = self._run(skewed, kopi_analysis)

        assert all(scene.duration_seconds > 0 for scene in scenes)
        assert sum(scene.duration_seconds for scene in scenes) == pytest.approx(25.0, abs=0.05)


def test_discount_detection():
    assert implies_discount("beli sekarang diskon 20%")
    assert implies_discount(None, "Big SALE this weekend")
    assert implies_discount("Promo spesial")
    assert implies_discount("Get 10 off your first order")
    assert not implies_discount("Fresh coffee for busy mornings", None)
    assert not implies_discount("Headphones that switch off the noise so you can relax.")
    assert not implies_discount("Kick off your day with a warm cup")


def test_visual_rules_do_not_duplicate_existing_cues(kopi_analysis):
    prompt = f"Coffee cup with fast cuts, bright saturation and {BRAND_COLOR} lighting"

    result = apply_visual_rules(prompt, kopi_analysis, BRAND_COLOR)

    assert result.count(URGENT_CUE) == 1
    assert result.count(BRAND_COLOR) == 1
    assert URGENCY_CUE in result
