"""Unit tests for ScriptGenerator."""

import json

import pytest

from reelgen.agents import ScriptBrief, ScriptGenerator
from reelgen.agents.script import (
    DEFAULT_CTA,
    DURATION_PROFILES,
    MAX_KEYWORDS,
    derive_keywords,
    hook_is_topical,
)
from reelgen.errors import CollaboratorError
from reelgen.models import DurationPreference
from reelgen.text import tokenize

TOPIC = "Morning routines for productivity"


def _claude_reply(**overrides) -> str:
    data = {
        "hook": "Nobody tells you this about your first hour awake.",
        "scenes": [
            {
                "title": "Light first",
                "narration": " ".join(["Open the curtains and let daylight reset your clock"] * 5),
                "visualIdea": "Curtains thrown open, sunlight floods the room",
            },
            {
                "title": "Water",
                "narration": "Drink a full glass of water before anything else.",
                "visualIdea": "Glass being filled in slow motion",
            },
        ],
        "closing": "Small wins compound",
        "keywords": ["sleep", "focus"],
    }
    data.update(overrides)
    return "Here you go:\n```json\n" + json.dumps(data) + "\n```"


class TestTemplateScript:
    """Tests for the deterministic template path."""

    @pytest.mark.unit
    @pytest.mark.parametrize("duration", list(DurationPreference))
    def test_scene_count_and_length_follow_profile(self, duration):
        script = ScriptGenerator().generate(TOPIC, duration_preference=duration)
        profile = DURATION_PROFILES[duration]

        assert len(script.scenes) == profile.scenes
        assert [s.id for s in script.scenes] == [f"scene_{i + 1}" for i in range(profile.scenes)]
        assert all(len(s.narration.split()) <= profile.words_per_scene for s in script.scenes)

    @pytest.mark.unit
    def test_longer_preference_means_more_scenes(self):
        generator = ScriptGenerator()
        counts = [
            len(generator.generate(TOPIC, duration_preference=d).scenes)
            for d in (DurationPreference.SHORT, DurationPreference.MEDIUM, DurationPreference.LONG)
        ]

        assert counts[0] <= counts[1] <= counts[2]
        assert counts[0] < counts[2]

    @pytest.mark.unit
    def test_hook_mentions_topic(self):
        script = ScriptGenerator().generate(TOPIC, tone="Calm")

        assert hook_is_topical(script.hook, TOPIC)

    @pytest.mark.unit
    def test_closing_carries_default_cta(self):
        script = ScriptGenerator().generate(TOPIC)

        assert DEFAULT_CTA in script.closing

    @pytest.mark.unit
    def test_custom_cta_and_audience(self):
        script = ScriptGenerator().generate(
            TOPIC, audience="busy parents", call_to_action="Share this with a friend"
        )

        assert "Share this with a friend" in script.closing
        assert "parents" in script.keywords

    @pytest.mark.unit
    def test_deterministic(self):
        generator = ScriptGenerator()

        assert generator.generate(TOPIC, tone="Witty") == generator.generate(TOPIC, tone="Witty")

    @pytest.mark.unit
    def test_keywords_capped_and_unique(self):
        script = ScriptGenerator().generate(
            "Deep learning transformers attention embeddings tokenizers benchmarks",
            tone="Playful nerdy",
            audience="software engineers",
        )

        assert 1 <= len(script.keywords) <= MAX_KEYWORDS
        assert len(script.keywords) == len(set(script.keywords))
        assert script.keywords[0] == "deep"

    @pytest.mark.unit
    def test_run_reports_fallback(self):
        outcome = ScriptGenerator().run(ScriptBrief(topic=TOPIC))

        assert outcome.used_fallback
        assert outcome.error_message is None

    @pytest.mark.unit
    def test_blank_topic_rejected(self):
        with pytest.raises(ValueError):
            ScriptGenerator().run(ScriptBrief(topic="  "))

    @pytest.mark.unit
    def test_topic_whitespace_collapsed(self):
        script = ScriptGenerator().generate("Morning\n  routines\t")

        assert "Morning routines" in script.hook
        assert "\n" not in script.hook
        assert "\n" not in script.closing
        assert "\t" not in script.closing


class TestClaudeScript:
    """Tests for the Claude path with a mocked client."""

    @pytest.mark.unit
    def test_reply_is_normalised(self, mock_anthropic_client, no_retry_delay):
        mock_anthropic_client.create_message.return_value = _claude_reply()
        generator = ScriptGenerator(client=mock_anthropic_client, retry=no_retry_delay)

        outcome = generator.run(ScriptBrief(topic=TOPIC))
        script = outcome.value

        assert not outcome.used_fallback
        assert script.hook.startswith(TOPIC)
        assert len(script.scenes) == DURATION_PROFILES[DurationPreference.MEDIUM].scenes
        assert script.scenes[0].title == "Light first"
        assert len(script.scenes[0].narration.split()) <= 24
        assert script.scenes[1].visual_idea == "Glass being filled in slow motion"
        assert script.closing.endswith(f"{DEFAULT_CTA}.")
        assert len(script.keywords) == MAX_KEYWORDS
        assert "sleep" in script.keywords

    @pytest.mark.unit
    def test_topic_inside_another_word_is_not_topical(self, mock_anthropic_client, no_retry_delay):
        hook = "Nobody said this would change everything you know."
        mock_anthropic_client.create_message.return_value = _claude_reply(hook=hook)
        generator = ScriptGenerator(client=mock_anthropic_client, retry=no_retry_delay)

        script = generator.run(ScriptBrief(topic="AI")).value

        assert script.hook == f"AI: {hook}"
        assert set(tokenize("AI")) & set(tokenize(script.hook))

    @pytest.mark.unit
    def test_prompt_carries_preferences(self, mock_anthropic_client, no_retry_delay):
        mock_anthropic_client.create_message.return_value = _claude_reply()
        generator = ScriptGenerator(client=mock_anthropic_client, retry=no_retry_delay)

        generator.generate(TOPIC, tone="Calm", duration_preference=DurationPreference.SHORT)

        kwargs = mock_anthropic_client.create_message.call_args.kwargs
        assert "TOPIC: Morning routines for productivity" in kwargs["prompt"]
        assert "TONE: Calm" in kwargs["prompt"]
        assert "NUMBER OF SCENES: 3" in kwargs["prompt"]
        assert kwargs["system"] == generator.system_prompt

    @pytest.mark.unit
    def test_malformed_json_falls_back(self, mock_anthropic_client, no_retry_delay):
        mock_anthropic_client.create_message.return_value = "Sorry, I can't help with that."
        generator = ScriptGenerator(client=mock_anthropic_client, retry=no_retry_delay)

        outcome = generator.run(ScriptBrief(topic=TOPIC))

        assert outcome.used_fallback
        assert "Invalid JSON" in outcome.error_message
        assert outcome.value == ScriptGenerator().template_script(ScriptBrief(topic=TOPIC))

    @pytest.mark.unit
    def test_missing_scenes_falls_back(self, mock_anthropic_client, no_retry_delay):
        mock_anthropic_client.create_message.return_value = _claude_reply(scenes=[])
        generator = ScriptGenerator(client=mock_anthropic_client, retry=no_retry_delay)

        assert generator.run(ScriptBrief(topic=TOPIC)).used_fallback

    @pytest.mark.unit
    def test_collaborator_failure_retries_then_falls_back(self, mock_anthropic_client, no_retry_delay):
        mock_anthropic_client.create_message.side_effect = CollaboratorError("anthropic", "rate limited")
        generator = ScriptGenerator(client=mock_anthropic_client, retry=no_retry_delay)

        outcome = generator.run(ScriptBrief(topic=TOPIC))

        assert outcome.used_fallback
        assert "rate limited" in outcome.error_message
        assert mock_anthropic_client.create_message.call_count == 2


@pytest.mark.unit
def test_derive_keywords_order():
    assert derive_keywords("Home coffee", "Calm", "students", extra=["espresso"]) == [
        "home",
        "coffee",
        "calm",
        "students",
        "espresso",
    ]


@pytest.mark.unit
def test_hook_is_topical():
    assert hook_is_topical("Coffee at home beats the cafe.", "Home coffee")
    assert not hook_is_topical(
        "You will not believe what happens next when you try this one weird trick with coffee",
        "Home coffee",
    )


@pytest.mark.unit
def test_hook_is_topical_matches_whole_words():
    assert not hook_is_topical("Nobody said this would change everything.", "AI")
    assert not hook_is_topical("Start your day with a plan.", "art")
    assert hook_is_topical("Why AI is everywhere now.", "AI")


@pytest.mark.unit
def test_hook_is_topical_for_stop_word_topic():
    assert hook_is_topical("How to win every argument.", "how to")
    assert not hook_is_topical("However you start, finish strong.", "how")
