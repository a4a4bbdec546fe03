"""Exception types raised across the generation pipeline."""

from typing import Optional


class ReelgenError(Exception):
    """Base class for all reelgen errors."""


class RequestValidationError(ReelgenError):
    """The request payload is malformed (missing topic, unknown platform, ...)."""


class CollaboratorError(ReelgenError):
    """An external generative service was configured but the call failed.

    Stages catch this and take their fallback path; it never reaches the caller
    of the pipeline.
    """

    def __init__(self, service: str, message: str, retryable: bool = True) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
        self.retryable = retryable


class PipelineError(ReelgenError):
    """Unexpected failure inside the pipeline; the whole request fails."""

    def __init__(self, message: str, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage
