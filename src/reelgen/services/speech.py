"""OpenAI speech synthesis client wrapper."""

import logging
from dataclasses import dataclass
from typing import Optional

from openai import OpenAI, APIConnectionError, APIError, RateLimitError

from ..config import config
from ..errors import CollaboratorError

logger = logging.getLogger(__name__)


@dataclass
class SpeechResult:
    """Audio returned by the speech service."""

    audio: bytes
    format: str


class SpeechClient:
    """Client wrapper for OpenAI text-to-speech."""

    DEFAULT_FORMAT = "mp3"
    # Service-side limit on input length
    MAX_INPUT_CHARS = 4096

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        voice: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._api_key = api_key or config.openai_api_key
        if not self._api_key:
            raise ValueError("OpenAI API key not provided. Set OPENAI_API_KEY env var.")

        self._model = model or config.tts_model
        self._voice = voice or config.tts_voice
        self._client = OpenAI(
            api_key=self._api_key,
            timeout=timeout or config.request_timeout,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._model

    def synthesize(self, text: str, response_format: str = DEFAULT_FORMAT) -> SpeechResult:
        """Convert text to speech.

        Raises:
            CollaboratorError: If the request fails or returns no audio.
        """
        if not text.strip():
            raise CollaboratorError("openai-tts", "nothing to synthesize", retryable=False)

        if len(text) > self.MAX_INPUT_CHARS:
            logger.warning(f"Speech input truncated from {len(text)} to {self.MAX_INPUT_CHARS} chars")
            text = text[: self.MAX_INPUT_CHARS]

        logger.info(f"Synthesizing speech with {self._model}/{self._voice}: {text[:50]}...")

        try:
            response = self._client.audio.speech.create(
                model=self._model,
                voice=self._voice,
                input=text,
                response_format=response_format,
            )
        except (RateLimitError, APIConnectionError) as e:
            raise CollaboratorError("openai-tts", str(e)) from e
        except APIError as e:
            raise CollaboratorError("openai-tts", str(e), retryable=False) from e

        audio = response.content
        if not audio:
            raise CollaboratorError("openai-tts", "empty audio payload", retryable=False)

        return SpeechResult(audio=audio, format=response_format)
