"""Thumbnail stage: deterministic prompt plus an image asset."""

import logging
import textwrap
from typing import List, Optional
from xml.sax.saxutils import escape

from ..errors import CollaboratorError
from ..models import StageOutcome, ThumbnailAsset
from ..retry import RetryPolicy
from ..services.imagen import ImagenClient
from ..text import stable_seed, truncate

logger = logging.getLogger(__name__)

FALLBACK_FORMAT = "svg"
WIDTH, HEIGHT = 1080, 1920
MAX_TITLE_LINES = 4

GRADIENTS = [
    ("#4f46e5", "#ec4899"),
    ("#0ea5e9", "#6366f1"),
    ("#f59e0b", "#ef4444"),
    ("#10b981", "#0ea5e9"),
    ("#8b5cf6", "#f43f5e"),
    ("#14b8a6", "#84cc16"),
]

NEGATIVE_PROMPT = "watermark, logo, blurry text, extra fingers, low contrast"


def build_prompt(topic: str, tone: str, hook: str) -> str:
    """Describe the thumbnail; depends only on the arguments."""
    topic = " ".join(topic.split())
    return (
        f"Vertical 9:16 thumbnail for a short-form video about \"{topic}\". "
        f"Mood: {' '.join(tone.split())}. "
        f"Visual concept inspired by the hook: \"{' '.join(hook.split())}\". "
        "One expressive focal subject, bold high-contrast colors, vibrant gradient "
        "background, generous space for a large headline, no small text, no watermark."
    )


def _title_lines(topic: str) -> List[str]:
    lines = textwrap.wrap(topic, width=16) or [topic]
    if len(lines) > MAX_TITLE_LINES:
        lines = lines[:MAX_TITLE_LINES]
        lines[-1] = truncate(lines[-1] + " ...", 16)
    return lines


def render_placeholder_svg(topic: str, tone: str, hook: str) -> str:
    """Gradient poster with the topic as headline; deterministic for its inputs."""
    seed = stable_seed(topic.lower(), tone.lower())
    start, end = GRADIENTS[seed % len(GRADIENTS)]
    lines = _title_lines(" ".join(topic.split()).upper())
    font_size = 132 if len(lines) <= 2 else 104
    line_height = int(font_size * 1.15)
    first_y = HEIGHT // 2 - (len(lines) - 1) * line_height // 2

    circles = []
    for i in range(3):
        cx = (seed >> (i * 8)) % WIDTH
        cy = (seed >> (i * 8 + 4)) % HEIGHT
        r = 220 + ((seed >> (i * 5)) % 260)
        circles.append(
            f'  <circle cx="{cx}" cy="{cy}" r="{r}" fill="#ffffff" fill-opacity="0.08"/>'
        )

    title = "\n".join(
        f'    <tspan x="{WIDTH // 2}" y="{first_y + i * line_height}">{escape(line)}</tspan>'
        for i, line in enumerate(lines)
    )
    badge = escape(truncate(tone, 28).upper())
    subtitle = escape(truncate(hook, 52))

    return "\n".join(
        [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{WIDTH}" height="{HEIGHT}" '
            f'viewBox="0 0 {WIDTH} {HEIGHT}">',
            "  <defs>",
            '    <linearGradient id="bg" x1="0" y1="0" x2="1" y2="1">',
            f'      <stop offset="0%" stop-color="{start}"/>',
            f'      <stop offset="100%" stop-color="{end}"/>',
            "    </linearGradient>",
            "  </defs>",
            f'  <rect width="{WIDTH}" height="{HEIGHT}" fill="url(#bg)"/>',
            *circles,
            f'  <rect x="80" y="220" rx="36" width="{WIDTH - 160}" height="96" fill="#0f172a" fill-opacity="0.55"/>',
            f'  <text x="{WIDTH // 2}" y="284" text-anchor="middle" font-family="Helvetica, Arial, sans-serif" '
            f'font-size="44" font-weight="700" letter-spacing="6" fill="#e0e7ff">{badge}</text>',
            f'  <text text-anchor="middle" font-family="Helvetica, Arial, sans-serif" font-size="{font_size}" '
            'font-weight="900" fill="#ffffff" stroke="#0f172a" stroke-width="6" paint-order="stroke">',
            title,
            "  </text>",
            f'  <text x="{WIDTH // 2}" y="{HEIGHT - 260}" text-anchor="middle" '
            'font-family="Helvetica, Arial, sans-serif" font-size="48" fill="#f8fafc" fill-opacity="0.9">'
            f"{subtitle}</text>",
            "</svg>",
        ]
    )


class ThumbnailDesigner:
    """Produces the thumbnail image and the prompt describing it."""

    def __init__(
        self,
        client: Optional[ImagenClient] = None,
        retry: Optional[RetryPolicy] = None,
    ) -> None:
        self._client = client
        self._retry = retry or RetryPolicy()

    @property
    def available(self) -> bool:
        return self._client is not None

    def design(self, topic: str, tone: str, hook: str) -> ThumbnailAsset:
        return self.run(topic, tone, hook).value

    def run(self, topic: str, tone: str, hook: str) -> StageOutcome[ThumbnailAsset]:
        prompt = build_prompt(topic, tone, hook)

        if not self.available:
            logger.info("No image service configured; drawing placeholder SVG")
            return StageOutcome.fallback(self.placeholder(topic, tone, hook, prompt))

        try:
            result = self._retry.call(lambda: self._request_image(prompt), description="Imagen thumbnail")
        except CollaboratorError as e:
            logger.warning(f"Imagen failed, drawing placeholder SVG: {e}")
            return StageOutcome.fallback(
                self.placeholder(topic, tone, hook, prompt), error_message=str(e)
            )

        return StageOutcome.primary(
            ThumbnailAsset.from_bytes(result.format, result.image, prompt=prompt)
        )

    def _request_image(self, prompt: str):
        result = self._client.generate_image(
            prompt=prompt,
            aspect_ratio="9:16",
            negative_prompt=NEGATIVE_PROMPT,
        )
        if not result.ok:
            raise CollaboratorError("imagen", result.error_message or "no image returned")
        return result

    @staticmethod
    def placeholder(topic: str, tone: str, hook: str, prompt: Optional[str] = None) -> ThumbnailAsset:
        svg = render_placeholder_svg(topic, tone, hook)
        return ThumbnailAsset.from_bytes(
            FALLBACK_FORMAT,
            svg.encode("utf-8"),
            prompt=prompt or build_prompt(topic, tone, hook),
        )
