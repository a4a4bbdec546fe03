"""Script agent: topic and preferences to a narrated scene breakdown."""

import json
import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..errors import CollaboratorError
from ..models import DurationPreference, Scene, Script, StageOutcome
from ..text import clip_words, stable_seed, tokenize, unique
from .base import BaseAgent

logger = logging.getLogger(__name__)

DEFAULT_TONE = "Bold & Energetic"
DEFAULT_AUDIENCE = "general audience"
DEFAULT_CTA = "Follow for more quick breakdowns"

MAX_KEYWORDS = 8
HOOK_SALIENCE_WORDS = 8
SPEAKING_RATE = 2.5  # words per second


@dataclass(frozen=True)
class DurationProfile:
    scenes: int
    words_per_scene: int
    beats: tuple

    @property
    def estimated_seconds(self) -> int:
        # Hook and closing add roughly two scenes' worth of speech
        words = (self.scenes + 2) * self.words_per_scene
        return int(round(words / SPEAKING_RATE))


# Beat indices refer to _BEATS
DURATION_PROFILES: Dict[DurationPreference, DurationProfile] = {
    DurationPreference.SHORT: DurationProfile(scenes=3, words_per_scene=18, beats=(0, 2, 6)),
    DurationPreference.MEDIUM: DurationProfile(scenes=5, words_per_scene=24, beats=(0, 1, 2, 4, 6)),
    DurationPreference.LONG: DurationProfile(scenes=7, words_per_scene=30, beats=(0, 1, 2, 3, 4, 5, 6)),
}

_HOOKS = (
    "{topic} is changing faster than you think. Here's the {n}-step breakdown.",
    "Stop scrolling: {topic} explained in under {seconds} seconds.",
    "{topic}, in {n} quick beats. Everything you need, nothing you don't.",
    "Most people get {topic} wrong. Let's fix that right now.",
)

# (title, narration, visual idea)
_BEATS = (
    (
        "Why it matters",
        "Why should {audience} care about {topic}? Because it quietly shapes the choices you make every single day.",
        "Fast push-in on a bold title card reading '{topic}'",
    ),
    (
        "The core idea",
        "At its heart, {topic} comes down to one simple idea you could explain to a friend in a single sentence.",
        "Whiteboard sketch revealing the core idea with animated arrows",
    ),
    (
        "A real example",
        "Picture a real example: someone leans into {topic} for one week and the difference is impossible to ignore.",
        "Split-screen before and after shot with on-screen captions",
    ),
    (
        "The common mistake",
        "The most common mistake with {topic} is overcomplicating it. Start small, stay consistent, and measure what changes.",
        "Red X stamp over a cluttered desk, then a tidy minimal setup",
    ),
    (
        "Quick win",
        "Here is a quick win: pick one part of {topic} today and give it five focused minutes before you do anything else.",
        "Countdown timer overlay on a hands-on close-up",
    ),
    (
        "Level up",
        "Once that feels easy, level up by pairing {topic} with honest feedback from people you trust.",
        "Montage of collaboration shots with an upward graph animation",
    ),
    (
        "The takeaway",
        "The takeaway: {topic} rewards curiosity, so keep asking better questions and keep showing up.",
        "Slow zoom out to the full scene as the title card returns",
    ),
)

SYSTEM_PROMPT = """You are a short-form video scriptwriter for YouTube Shorts, TikTok and Instagram Reels.
You write punchy, speakable narration with a scroll-stopping hook.

Output valid JSON only, with no additional text or markdown formatting.
The JSON object must have these keys:
  "hook": one line that names the topic within its first few words,
  "scenes": array of {"title", "narration", "visualIdea"} objects,
  "closing": one line that ends with the call to action,
  "keywords": array of short lowercase keywords."""


@dataclass
class ScriptBrief:
    """Input data for the script agent."""

    topic: str
    tone: Optional[str] = None
    audience: Optional[str] = None
    call_to_action: Optional[str] = None
    duration: DurationPreference = DurationPreference.MEDIUM

    @property
    def profile(self) -> DurationProfile:
        return DURATION_PROFILES[DurationPreference(self.duration)]

    @property
    def tone_or_default(self) -> str:
        return self.tone or DEFAULT_TONE

    @property
    def audience_or_default(self) -> str:
        return self.audience or DEFAULT_AUDIENCE

    @property
    def cta_or_default(self) -> str:
        return self.call_to_action or DEFAULT_CTA


def derive_keywords(
    topic: str,
    tone: str,
    audience: str,
    extra: Optional[List[str]] = None,
    limit: int = MAX_KEYWORDS,
) -> List[str]:
    """Topic, tone, then audience tokens, topped up with ``extra``; capped at ``limit``."""
    keywords = unique(tokenize(topic) + tokenize(tone) + tokenize(audience))
    for item in extra or []:
        keywords = unique(keywords + tokenize(str(item)))
    if not keywords:
        keywords = [topic.strip().lower()]
    return keywords[:limit]


def hook_is_topical(hook: str, topic: str) -> bool:
    """Whether a topic token appears within the hook's opening words.

    Matching is per whole token, so "AI" is not found inside "said". A topic
    made only of stop words must appear as a whole phrase instead.
    """
    opening = " ".join(hook.split()[:HOOK_SALIENCE_WORDS])
    topic_tokens = set(tokenize(topic))
    if topic_tokens:
        return bool(topic_tokens & set(tokenize(opening)))
    phrase = " ".join(topic.split())
    if not phrase:
        return False
    return re.search(rf"(?<!\w){re.escape(phrase)}(?!\w)", opening, re.IGNORECASE) is not None


def _with_cta(closing: str, cta: str) -> str:
    closing = " ".join(closing.split())
    cta = " ".join(cta.split())
    if cta.lower() in closing.lower():
        return closing
    if closing and not closing.endswith((".", "!", "?")):
        closing += "."
    return f"{closing} {_sentence(cta)}".strip()


def _sentence(text: str) -> str:
    text = text.strip()
    return text if text.endswith((".", "!", "?")) else f"{text}."


class ScriptGenerator(BaseAgent[ScriptBrief, StageOutcome[Script]]):
    """Agent for turning a topic into a narration script.

    Uses Claude when a client is configured and falls back to a deterministic
    template otherwise, or when Claude fails or answers with malformed JSON.
    Either way the result honours the duration profile, the topical hook and
    the keyword cap.
    """

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "ScriptGenerator"

    @property
    def system_prompt(self) -> str:
        """Return the system prompt for script generation."""
        return SYSTEM_PROMPT

    def generate(
        self,
        topic: str,
        tone: Optional[str] = None,
        audience: Optional[str] = None,
        call_to_action: Optional[str] = None,
        duration_preference: DurationPreference = DurationPreference.MEDIUM,
    ) -> Script:
        """Produce a script; never fails for a non-empty topic."""
        brief = ScriptBrief(
            topic=topic,
            tone=tone,
            audience=audience,
            call_to_action=call_to_action,
            duration=duration_preference,
        )
        return self.run(brief).value

    def run(self, input_data: ScriptBrief) -> StageOutcome[Script]:
        """Generate the script for ``input_data``.

        Returns:
            StageOutcome whose ``used_fallback`` tells whether Claude was used.
        """
        topic = " ".join((input_data.topic or "").split())
        if not topic:
            raise ValueError("topic must be non-empty")
        # Hook and closing are single lines
        input_data = replace(input_data, topic=topic)

        self._logger.info(
            f"Drafting script for: '{input_data.topic}' "
            f"({DurationPreference(input_data.duration).value}, {input_data.profile.scenes} scenes)"
        )

        if not self.available:
            self._logger.info("No Claude client configured; using template script")
            return StageOutcome.fallback(self.template_script(input_data))

        try:
            response = self._create_message(
                prompt=self._build_prompt(input_data),
                max_tokens=2048,
                temperature=0.8,  # Higher temperature for creative output
            )
            script = self._parse_response(response, input_data)
        except (CollaboratorError, ValueError) as e:
            self._logger.warning(f"Claude script failed, using template: {e}")
            return StageOutcome.fallback(self.template_script(input_data), error_message=str(e))

        self._logger.info(f"Generated {len(script.scenes)} scenes with {self.model}")
        return StageOutcome.primary(script)

    def _build_prompt(self, input_data: ScriptBrief) -> str:
        """Build the user prompt for script generation."""
        profile = input_data.profile
        prompt_parts = [
            "Write a short-form video script for the following topic:",
            "",
            f"TOPIC: {input_data.topic}",
            f"TONE: {input_data.tone_or_default}",
            f"AUDIENCE: {input_data.audience_or_default}",
            f"CALL TO ACTION: {input_data.cta_or_default}",
            f"NUMBER OF SCENES: {profile.scenes}",
            f"MAX WORDS PER SCENE NARRATION: {profile.words_per_scene}",
            f"TARGET RUNTIME: about {profile.estimated_seconds} seconds",
            "",
            "Each visualIdea should be a short, concrete shot direction for a vertical 9:16 video.",
            f"Give up to {MAX_KEYWORDS} keywords.",
        ]
        return "\n".join(prompt_parts)

    def _parse_response(self, response: str, input_data: ScriptBrief) -> Script:
        """Parse Claude's response into a normalised Script.

        Raises:
            ValueError: If response cannot be parsed as a script object.
        """
        json_str = self._extract_json(response)

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self._logger.debug(f"Raw response: {response}")
            raise ValueError(f"Invalid JSON in response: {e}")

        if not isinstance(data, dict):
            raise ValueError("Response is not a JSON object")

        scenes_data = data.get("scenes")
        if not isinstance(scenes_data, list) or not scenes_data:
            raise ValueError("Response does not contain a scenes array")

        hook = str(data.get("hook") or "").strip()
        closing = str(data.get("closing") or "").strip()
        if not hook or not closing:
            raise ValueError("Response is missing hook or closing")

        keywords = data.get("keywords")
        extra = keywords if isinstance(keywords, list) else []

        try:
            return Script(
                hook=self._topical_hook(hook, input_data.topic),
                scenes=self._normalise_scenes(scenes_data, input_data),
                closing=_with_cta(closing, input_data.cta_or_default),
                keywords=derive_keywords(
                    input_data.topic,
                    input_data.tone_or_default,
                    input_data.audience_or_default,
                    extra=extra,
                ),
            )
        except ValidationError as e:
            raise ValueError(f"Response does not form a valid script: {e}")

    def _normalise_scenes(self, scenes_data: List[Any], input_data: ScriptBrief) -> List[Scene]:
        """Force the profile's scene count and narration length."""
        profile = input_data.profile
        template = self._template_scenes(input_data)
        scenes: List[Scene] = []

        for i in range(profile.scenes):
            item = scenes_data[i] if i < len(scenes_data) else None
            if not isinstance(item, dict) or not str(item.get("narration") or "").strip():
                scenes.append(template[i])
                continue
            scenes.append(
                Scene(
                    id=f"scene_{i + 1}",
                    title=str(item.get("title") or template[i].title).strip(),
                    narration=clip_words(str(item["narration"]), profile.words_per_scene),
                    visual_idea=str(
                        item.get("visualIdea") or item.get("visual_idea") or template[i].visual_idea
                    ).strip(),
                )
            )

        return scenes

    @staticmethod
    def _topical_hook(hook: str, topic: str) -> str:
        hook = " ".join(hook.split())
        if hook_is_topical(hook, topic):
            return hook
        return f"{topic}: {hook}"

    def template_script(self, input_data: ScriptBrief) -> Script:
        """Deterministic script built from the template bank."""
        profile = input_data.profile
        topic = input_data.topic.strip()
        seed = stable_seed(topic.lower(), input_data.tone_or_default.lower())
        hook = _HOOKS[seed % len(_HOOKS)].format(
            topic=topic,
            n=profile.scenes,
            seconds=profile.estimated_seconds,
        )
        hook = hook[0].upper() + hook[1:]

        closing = _with_cta(f"That's {topic} in a nutshell.", input_data.cta_or_default)

        return Script(
            hook=hook,
            scenes=self._template_scenes(input_data),
            closing=closing,
            keywords=derive_keywords(
                topic, input_data.tone_or_default, input_data.audience_or_default
            ),
        )

    @staticmethod
    def _template_scenes(input_data: ScriptBrief) -> List[Scene]:
        profile = input_data.profile
        topic = input_data.topic.strip()
        audience = input_data.audience or "you"
        pacing = input_data.tone_or_default.lower()

        scenes = []
        for i, beat in enumerate(profile.beats):
            title, narration, visual = _BEATS[beat]
            scenes.append(
                Scene(
                    id=f"scene_{i + 1}",
                    title=title,
                    narration=clip_words(
                        narration.format(topic=topic, audience=audience),
                        profile.words_per_scene,
                    ),
                    visual_idea=f"{visual.format(topic=topic)}; {pacing} pacing",
                )
            )
        return scenes

    def _extract_json(self, response: str) -> str:
        """Extract JSON from a response that may contain markdown or other text."""
        # Try to find JSON in code blocks
        if "```json" in response:
            start = response.find("```json") + 7
            end = response.find("```", start)
            if end > start:
                return response[start:end].strip()

        if "```" in response:
            start = response.find("```") + 3
            end = response.find("```", start)
            if end > start:
                return response[start:end].strip()

        start = response.find("{")
        if start != -1:
            depth = 0
            for i, char in enumerate(response[start:], start):
                if char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                    if depth == 0:
                        return response[start:i + 1]

        # Return as-is if no JSON structure found
        return response.strip()
