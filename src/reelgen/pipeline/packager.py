"""Platform packaging: one tailored social post per requested platform."""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from ..models import Platform, Script, SocialPost, resolve_platforms
from ..text import truncate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformProfile:
    """Copy conventions for one platform."""

    headline_limit: int
    max_tags: int
    anchor_tags: tuple
    camel_case: bool
    compound_tag: bool
    caption_suffix: str
    schedule_hint: str


PROFILES = {
    Platform.YOUTUBE: PlatformProfile(
        headline_limit=100,
        max_tags=5,
        anchor_tags=("#Shorts",),
        camel_case=True,
        compound_tag=False,
        caption_suffix="",
        schedule_hint="Publish 12-3pm local on weekdays so Shorts ramps up before evening viewing",
    ),
    Platform.TIKTOK: PlatformProfile(
        headline_limit=90,
        max_tags=6,
        anchor_tags=("#fyp", "#foryou"),
        camel_case=False,
        compound_tag=False,
        caption_suffix="",
        schedule_hint="Post 7-9am local for peak TikTok engagement",
    ),
    Platform.REELS: PlatformProfile(
        headline_limit=125,
        max_tags=8,
        anchor_tags=("#reels",),
        camel_case=False,
        compound_tag=True,
        caption_suffix="Save this for later.",
        schedule_hint="Share 11am-1pm local when Reels discovery peaks around lunch",
    ),
    Platform.INSTAGRAM: PlatformProfile(
        headline_limit=125,
        max_tags=12,
        anchor_tags=("#instagood",),
        camel_case=True,
        compound_tag=True,
        caption_suffix="Link in bio.",
        schedule_hint="Post 6-9pm local when feed engagement is highest",
    ),
}


def _tag(text: str, camel_case: bool) -> Optional[str]:
    parts = ["".join(ch for ch in word if ch.isalnum()) for word in text.split()]
    parts = [part for part in parts if part]
    if not parts:
        return None
    if camel_case:
        return "#" + "".join(part[0].upper() + part[1:] for part in parts)
    return "#" + "".join(parts).lower()


def build_hashtags(keywords: Sequence[str], profile: PlatformProfile) -> List[str]:
    """Anchor tags, keyword tags, then a compound tag; unique ignoring case."""
    candidates: List[Optional[str]] = list(profile.anchor_tags)
    candidates.extend(_tag(keyword, profile.camel_case) for keyword in keywords)
    if profile.compound_tag and len(keywords) >= 2:
        candidates.append(_tag(f"{keywords[0]} {keywords[1]}", profile.camel_case))

    tags: List[str] = []
    seen = set()
    for tag in candidates:
        if not tag or tag.lower() in seen:
            continue
        seen.add(tag.lower())
        tags.append(tag)
        if len(tags) >= profile.max_tags:
            break
    return tags


def build_caption(script: Script, call_to_action: Optional[str], suffix: str) -> str:
    parts = [script.closing.strip()]
    if call_to_action and call_to_action.strip().lower() not in script.closing.lower():
        cta = call_to_action.strip()
        parts.append(cta if cta.endswith((".", "!", "?")) else f"{cta}.")
    if suffix:
        parts.append(suffix)
    return " ".join(part for part in parts if part)


class PlatformPackager:
    """Derives per-platform copy from the script."""

    def package(
        self,
        script: Script,
        platforms: Optional[Iterable[Union[Platform, str]]] = None,
        call_to_action: Optional[str] = None,
    ) -> List[SocialPost]:
        """Build one post per platform, in the caller's order, without duplicates.

        Raises:
            ValueError: If a platform key is not supported.
        """
        resolved = resolve_platforms([Platform(p) for p in platforms or []])
        posts = []
        for platform in resolved:
            profile = PROFILES[platform]
            posts.append(
                SocialPost(
                    platform=platform,
                    headline=truncate(script.hook, profile.headline_limit),
                    caption=build_caption(script, call_to_action, profile.caption_suffix),
                    hashtags=build_hashtags(script.keywords, profile),
                    schedule_hint=profile.schedule_hint,
                )
            )

        logger.info(f"Packaged posts for: {', '.join(p.value for p in resolved)}")
        return posts
