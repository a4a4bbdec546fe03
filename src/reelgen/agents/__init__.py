"""AI agents for content generation and planning."""

from .base import BaseAgent
from .script import ScriptBrief, ScriptGenerator

__all__ = ["BaseAgent", "ScriptBrief", "ScriptGenerator"]
