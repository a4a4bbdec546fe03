"""Retry policy for external collaborator calls."""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from .config import Config
from .errors import CollaboratorError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential-backoff retry for one collaborator call.

    Attributes:
        max_attempts: Total attempts, 1 disables retrying.
        base_delay: Delay before the second attempt; doubles each time.
    """

    max_attempts: int = 2
    base_delay: float = 1.0

    @classmethod
    def from_config(cls, cfg: Config) -> "RetryPolicy":
        return cls(max_attempts=cfg.max_attempts, base_delay=cfg.retry_delay)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2**attempt)

    def call(
        self,
        func: Callable[[], T],
        description: str = "collaborator call",
        sleep: Optional[Callable[[float], None]] = None,
    ) -> T:
        """Run ``func`` until it succeeds or attempts run out.

        Only CollaboratorError is retried. Anything else is a bug in the caller
        and propagates on the first attempt.

        Raises:
            CollaboratorError: The last failure, once attempts are exhausted or
                the error is marked non-retryable.
        """
        sleep = sleep or time.sleep
        attempts = max(1, self.max_attempts)

        for attempt in range(attempts):
            try:
                logger.debug(f"{description} (attempt {attempt + 1}/{attempts})")
                return func()

            except CollaboratorError as e:
                if not e.retryable or attempt == attempts - 1:
                    raise
                delay = self.delay_for(attempt)
                logger.warning(f"{description} failed: {e}. Retrying in {delay:.1f}s...")
                sleep(delay)

        raise CollaboratorError(description, "Max retries exceeded")
