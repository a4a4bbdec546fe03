"""Agents that draft copy with Claude when a client is configured."""

import logging
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from ..retry import RetryPolicy
from ..services.anthropic import AnthropicClient

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Claude-backed agent with a local fallback.

    Subclasses supply the system prompt and ``run``. Without a client,
    ``available`` is False and ``run`` is expected to answer from local
    templates; with one, ``_create_message`` sends the prompt through the
    agent's RetryPolicy.
    """

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        retry: Optional[RetryPolicy] = None,
    ) -> None:
        """
        Args:
            client: Claude client, or None to work offline.
            retry: Policy for Claude calls. Defaults to RetryPolicy().
        """
        self._client = client
        self._retry = retry or RetryPolicy()
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        ...

    @property
    def available(self) -> bool:
        return self._client is not None

    @property
    def model(self) -> Optional[str]:
        """Claude model in use, None when offline."""
        return self._client.model if self._client else None

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        ...

    def _create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> str:
        """Send ``prompt`` with this agent's system prompt and return the reply text.

        Raises:
            CollaboratorError: Once the retry policy gives up.
        """
        if self._client is None:
            raise RuntimeError(f"{self.name} has no Claude client")

        self._logger.debug(f"Prompt is {len(prompt)} chars, max_tokens={max_tokens}")
        reply = self._retry.call(
            lambda: self._client.create_message(
                prompt=prompt,
                max_tokens=max_tokens,
                system=self.system_prompt,
                temperature=temperature,
            ),
            description=f"{self.name} Claude call",
        )
        self._logger.debug(f"Reply is {len(reply)} chars")
        return reply
