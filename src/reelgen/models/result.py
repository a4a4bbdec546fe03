"""Generation result and pipeline run state."""

from typing import Any, Dict, List
from enum import Enum
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .assets import MediaAsset, ThumbnailAsset
from .script import Script
from .social import SocialPost


class PipelineState(str, Enum):
    """Pipeline state enum, in forward order."""
    RECEIVED = "received"
    SCRIPT_DRAFTED = "script_drafted"
    MEDIA_SYNTHESIZING = "media_synthesizing"
    VIDEO_COMPOSED = "video_composed"
    THUMBNAIL_DESIGNED = "thumbnail_designed"
    PACKAGED = "packaged"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (PipelineState.COMPLETE, PipelineState.FAILED)


_ORDER = list(PipelineState)


class PipelineRun(BaseModel):
    """Request-scoped state tracking."""

    state: PipelineState = Field(default=PipelineState.RECEIVED, description="Current state")
    history: List[PipelineState] = Field(
        default_factory=lambda: [PipelineState.RECEIVED], description="Visited states"
    )
    fallbacks: List[str] = Field(default_factory=list, description="Stages that used a fallback")
    errors: List[str] = Field(default_factory=list, description="Error messages")

    class Config:
        """Pydantic config."""
        frozen = False

    def advance(self, state: PipelineState) -> bool:
        """Move forward to ``state``; backward or repeated moves are ignored.

        Returns:
            True if the state changed.
        """
        if self.state.terminal:
            return False
        if state is not PipelineState.FAILED and _ORDER.index(state) <= _ORDER.index(self.state):
            return False
        self.state = state
        self.history.append(state)
        return True

    def fail(self, message: str) -> None:
        self.errors.append(message)
        self.advance(PipelineState.FAILED)


class GenerationResult(BaseModel):
    """The complete bundle returned for one request."""

    script: Script
    voiceover: MediaAsset
    video: MediaAsset
    thumbnail: ThumbnailAsset
    social_posts: List[SocialPost] = Field(default_factory=list)
    workflow_notes: List[str] = Field(default_factory=list)

    class Config:
        """Pydantic config."""
        alias_generator = to_camel
        populate_by_name = True

    def to_payload(self) -> Dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        return self.model_dump(mode="json", by_alias=True)
