"""Generation request model."""

from enum import Enum
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..errors import RequestValidationError


class DurationPreference(str, Enum):
    """Target runtime bucket for the script."""
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class Platform(str, Enum):
    """Supported social destinations, in canonical order."""
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    REELS = "reels"
    INSTAGRAM = "instagram"

    @property
    def label(self) -> str:
        return PLATFORM_LABELS[self]


PLATFORM_LABELS = {
    Platform.YOUTUBE: "YouTube Shorts",
    Platform.TIKTOK: "TikTok",
    Platform.REELS: "Instagram Reels",
    Platform.INSTAGRAM: "Instagram Feed",
}

ALL_PLATFORMS: List[Platform] = list(Platform)


def resolve_platforms(platforms: Optional[List[Platform]]) -> List[Platform]:
    """De-duplicate platforms keeping first occurrence; empty means all four."""
    if not platforms:
        return list(ALL_PLATFORMS)
    seen: List[Platform] = []
    for platform in platforms:
        if platform not in seen:
            seen.append(platform)
    return seen


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class GenerationRequest(BaseModel):
    """One topic plus optional styling preferences."""

    topic: str = Field(..., description="Subject of the content package")
    tone: Optional[str] = Field(None, description="Brand tone")
    audience: Optional[str] = Field(None, description="Target audience")
    call_to_action: Optional[str] = Field(None, description="Closing call to action")
    duration_preference: DurationPreference = Field(
        default=DurationPreference.MEDIUM, description="Runtime bucket"
    )
    platforms: List[Platform] = Field(
        default_factory=list, description="Requested platforms; empty means all"
    )

    class Config:
        """Pydantic config."""
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("topic")
    @classmethod
    def _topic_not_blank(cls, value: str) -> str:
        value = " ".join(value.split())
        if not value:
            raise ValueError("topic must be a non-empty string")
        return value

    @field_validator("tone", "audience", "call_to_action")
    @classmethod
    def _optional_text(cls, value: Optional[str]) -> Optional[str]:
        return _blank_to_none(value)

    @field_validator("duration_preference", mode="before")
    @classmethod
    def _duration_or_default(cls, value: Any) -> Any:
        return DurationPreference.MEDIUM if value is None else value

    @field_validator("platforms", mode="before")
    @classmethod
    def _platforms_or_empty(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @classmethod
    def from_payload(cls, payload: Any) -> "GenerationRequest":
        """Validate a raw request payload.

        Raises:
            RequestValidationError: If the payload is not a valid request.
        """
        if isinstance(payload, cls):
            return payload
        if not isinstance(payload, Mapping):
            raise RequestValidationError("Invalid request. Provide a topic string.")
        topic = payload.get("topic")
        if not isinstance(topic, str) or not topic.strip():
            raise RequestValidationError("Invalid request. Provide a topic string.")
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            messages = []
            for error in e.errors():
                location = ".".join(str(part) for part in error["loc"])
                messages.append(f"{location}: {error['msg']}")
            raise RequestValidationError("; ".join(messages)) from e

    def resolved_platforms(self) -> List[Platform]:
        return resolve_platforms(self.platforms)
