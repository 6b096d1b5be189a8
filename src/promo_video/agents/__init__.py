"""AI agents for structured generation stages."""

from .analysis import AnalysisAgent
from .base import BaseAgent
from .storyboard import StoryboardAgent, StoryboardInput

__all__ = ["AnalysisAgent", "BaseAgent", "StoryboardAgent", "StoryboardInput"]
