"""Claude text completions for the script agent."""

import logging
from typing import Any, Dict, Optional

from anthropic import Anthropic, APIConnectionError, APIError, APITimeoutError, RateLimitError

from ..config import config
from ..errors import CollaboratorError

logger = logging.getLogger(__name__)

SERVICE = "anthropic"


class AnthropicClient:
    """Thin wrapper over the Anthropic SDK.

    SDK retries are disabled; failures surface as CollaboratorError with
    ``retryable`` set for rate limits, timeouts and connection errors so the
    caller's RetryPolicy decides what happens next.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            api_key: Defaults to ANTHROPIC_API_KEY.
            model: Defaults to REELGEN_SCRIPT_MODEL.
            timeout: Per-request deadline in seconds.
        """
        self._api_key = api_key or config.anthropic_api_key
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY not set")

        self._model = model or config.default_model
        self._client = Anthropic(
            api_key=self._api_key,
            timeout=timeout or config.request_timeout,
            max_retries=0,
        )

    @property
    def model(self) -> str:
        return self._model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
    ) -> str:
        """Single-turn completion.

        Returns:
            Text of the first content block.

        Raises:
            CollaboratorError: On any API failure or an empty reply.
        """
        request: Dict[str, Any] = {
            "model": self._model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            request["system"] = system

        try:
            response = self._client.messages.create(**request)
        except RateLimitError as e:
            logger.warning(f"Claude rate limited: {e}")
            raise CollaboratorError(SERVICE, f"rate limited: {e}") from e
        except (APIConnectionError, APITimeoutError) as e:
            logger.warning(f"Claude unreachable: {e}")
            raise CollaboratorError(SERVICE, f"connection error: {e}") from e
        except APIError as e:
            logger.error(f"Claude rejected the request: {e}")
            raise CollaboratorError(SERVICE, str(e), retryable=False) from e

        texts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        if not texts:
            raise CollaboratorError(SERVICE, "empty response", retryable=False)
        return texts[0]
