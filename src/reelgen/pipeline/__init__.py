"""Generation pipeline stages and their orchestration."""

from .orchestrator import Orchestrator
from .packager import PlatformPackager
from .scheduler import StageFailed, StageGraph
from .thumbnail import ThumbnailDesigner, build_prompt
from .video import VideoComposer
from .voiceover import VoiceoverSynthesizer

__all__ = [
    "Orchestrator",
    "PlatformPackager",
    "StageFailed",
    "StageGraph",
    "ThumbnailDesigner",
    "build_prompt",
    "VideoComposer",
    "VoiceoverSynthesizer",
]
