"""Binary asset models, carried as base64 text."""

import base64 as b64
from pydantic import BaseModel, Field


class MediaAsset(BaseModel):
    """Encoded audio or video payload with its format tag."""

    format: str = Field(..., description="Codec/container tag, e.g. mp3, wav, mp4")
    base64: str = Field(..., description="Payload encoded as base64 text")

    @classmethod
    def from_bytes(cls, format: str, data: bytes, **extra) -> "MediaAsset":
        return cls(format=format, base64=b64.b64encode(data).decode("ascii"), **extra)

    def to_bytes(self) -> bytes:
        return b64.b64decode(self.base64)

    @property
    def size(self) -> int:
        """Decoded payload size in bytes."""
        return len(self.to_bytes())


class ThumbnailAsset(MediaAsset):
    """Still image plus the prompt that describes it."""

    prompt: str = Field(..., description="Text used to request or synthesize the image")
