"""Data models for the content generator."""

from .request import (
    ALL_PLATFORMS,
    DurationPreference,
    GenerationRequest,
    Platform,
    PLATFORM_LABELS,
    resolve_platforms,
)
from .script import Scene, Script
from .assets import MediaAsset, ThumbnailAsset
from .social import SocialPost
from .result import GenerationResult, PipelineRun, PipelineState
from .outcome import StageOutcome

__all__ = [
    "ALL_PLATFORMS",
    "DurationPreference",
    "GenerationRequest",
    "Platform",
    "PLATFORM_LABELS",
    "resolve_platforms",
    "Scene",
    "Script",
    "MediaAsset",
    "ThumbnailAsset",
    "SocialPost",
    "GenerationResult",
    "PipelineRun",
    "PipelineState",
    "StageOutcome",
]
