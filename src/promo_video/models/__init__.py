"""Data models for the promo video pipeline."""

from .analysis import AUDIO_MIX_STANDARD, EntityAnalysis
from .brand import BrandConfiguration
from .scene import Scene, SceneType
from .session import Session, SessionEvent, SessionEventKind, WizardStep
from .video import VideoRenderState

__all__ = [
    "AUDIO_MIX_STANDARD",
    "BrandConfiguration",
    "EntityAnalysis",
    "Scene",
    "SceneType",
    "Session",
    "SessionEvent",
    "SessionEventKind",
    "VideoRenderState",
    "WizardStep",
]
