"""Stage outcome wrapper."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """What a stage produced and which path produced it."""

    value: T
    used_fallback: bool = False
    error_message: Optional[str] = None

    @classmethod
    def primary(cls, value: T) -> "StageOutcome[T]":
        return cls(value=value)

    @classmethod
    def fallback(cls, value: T, error_message: Optional[str] = None) -> "StageOutcome[T]":
        return cls(value=value, used_fallback=True, error_message=error_message)
