"""Script and scene data models."""

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class Scene(BaseModel):
    """Represents a single narrated beat of the video."""

    id: str = Field(..., description="Unique scene identifier")
    title: str = Field(..., description="Short label")
    narration: str = Field(..., description="Spoken text for this beat")
    visual_idea: str = Field(..., description="Short visual direction")

    class Config:
        """Pydantic config."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


class Script(BaseModel):
    """Narration script shared read-only by every downstream stage."""

    hook: str = Field(..., description="Opening line")
    scenes: List[Scene] = Field(..., description="Ordered scenes", min_length=1)
    closing: str = Field(..., description="Closing line")
    keywords: List[str] = Field(..., description="Ordered unique keywords", min_length=1)

    class Config:
        """Pydantic config."""
        frozen = True
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("scenes")
    @classmethod
    def _unique_scene_ids(cls, scenes: List[Scene]) -> List[Scene]:
        ids = [scene.id for scene in scenes]
        if len(ids) != len(set(ids)):
            raise ValueError("scene ids must be unique")
        return scenes

    @field_validator("keywords")
    @classmethod
    def _dedupe_keywords(cls, keywords: List[str]) -> List[str]:
        return list(dict.fromkeys(keywords))

    def spoken_text(self) -> str:
        """Hook, every scene narration, then the closing, in order."""
        parts = [self.hook, *(scene.narration for scene in self.scenes), self.closing]
        return " ".join(part.strip() for part in parts if part.strip())

    def word_count(self) -> int:
        return len(self.spoken_text().split())

    @classmethod
    def from_yaml(cls, path: Path) -> "Script":
        """Load script from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save script to YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(by_alias=True), f, default_flow_style=False, sort_keys=False)
