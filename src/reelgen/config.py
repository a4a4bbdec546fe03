"""Configuration management."""

import os
from dataclasses import dataclass
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() not in ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class Capabilities:
    """Which external generative services may be called.

    Each flag gates one stage's primary path; a False flag sends that stage
    straight to its local fallback without attempting a call.
    """

    script: bool = False
    speech: bool = False
    video: bool = False
    image: bool = False

    @classmethod
    def none(cls) -> "Capabilities":
        """Descriptor with every collaborator disabled (all fallbacks)."""
        return cls()

    def describe(self) -> dict[str, bool]:
        return {
            "script": self.script,
            "speech": self.speech,
            "video": self.video,
            "image": self.image,
        }


class Config(BaseModel):
    """Application configuration."""

    # API Keys
    anthropic_api_key: str = Field(
        default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""),
        description="Anthropic API key (script generation)"
    )
    openai_api_key: str = Field(
        default_factory=lambda: os.getenv("OPENAI_API_KEY", ""),
        description="OpenAI API key (speech synthesis)"
    )
    google_cloud_project: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_PROJECT", ""),
        description="Google Cloud project ID (Imagen and Veo)"
    )
    google_cloud_location: str = Field(
        default_factory=lambda: os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
        description="Vertex AI region"
    )
    veo_output_bucket: str = Field(
        default_factory=lambda: os.getenv("VEO_OUTPUT_BUCKET", ""),
        description="Optional GCS bucket for Veo output; inline bytes when empty"
    )
    enable_veo: bool = Field(
        default_factory=lambda: _env_flag("REELGEN_ENABLE_VEO"),
        description="Allow Veo video rendering when Google Cloud is configured"
    )

    # Model settings
    default_model: str = Field(
        default_factory=lambda: os.getenv("REELGEN_SCRIPT_MODEL", "claude-sonnet-4-20250514"),
        description="Claude model used for scripts"
    )
    tts_model: str = Field(
        default_factory=lambda: os.getenv("REELGEN_TTS_MODEL", "gpt-4o-mini-tts"),
        description="OpenAI speech model"
    )
    tts_voice: str = Field(
        default_factory=lambda: os.getenv("REELGEN_TTS_VOICE", "alloy"),
        description="OpenAI speech voice"
    )
    imagen_model: str = Field(
        default_factory=lambda: os.getenv("REELGEN_IMAGEN_MODEL", "imagen-3.0-generate-001"),
        description="Imagen model name"
    )
    veo_model: str = Field(
        default_factory=lambda: os.getenv("REELGEN_VEO_MODEL", "veo-3.0-generate-001"),
        description="Veo model name"
    )

    # Deadlines and retries
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("REELGEN_REQUEST_TIMEOUT", "60")),
        description="Per-call timeout for external services, in seconds",
        gt=0,
    )
    veo_max_poll_time: float = Field(
        default_factory=lambda: float(os.getenv("REELGEN_VEO_MAX_POLL", "300")),
        description="Maximum seconds to wait for a Veo operation",
        gt=0,
    )
    max_attempts: int = Field(
        default_factory=lambda: int(os.getenv("REELGEN_MAX_ATTEMPTS", "2")),
        description="Attempts per external call before falling back",
        ge=1,
    )
    retry_delay: float = Field(
        default_factory=lambda: float(os.getenv("REELGEN_RETRY_DELAY", "1.0")),
        description="Base delay between retries (exponential backoff)",
        ge=0,
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def capabilities(self) -> Capabilities:
        """Derive collaborator availability from credential presence."""
        return Capabilities(
            script=bool(self.anthropic_api_key),
            speech=bool(self.openai_api_key),
            video=bool(self.google_cloud_project) and self.enable_veo,
            image=bool(self.google_cloud_project),
        )


# Global config instance
config = Config()
