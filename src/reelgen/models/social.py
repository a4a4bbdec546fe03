"""Social post data model."""

from typing import List
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .request import Platform


class SocialPost(BaseModel):
    """Copy tailored for one platform."""

    platform: Platform = Field(..., description="Destination platform key")
    headline: str = Field(..., description="Title or first line")
    caption: str = Field(..., description="Body copy")
    hashtags: List[str] = Field(default_factory=list, description="Ordered #tags")
    schedule_hint: str = Field(..., description="Timing suggestion")

    class Config:
        """Pydantic config."""
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True
