"""Session state: the aggregate the pipeline writes and the view reads."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..errors import SessionStateError
from .analysis import EntityAnalysis
from .brand import BrandConfiguration
from .scene import Scene, SceneType
from .video import VideoRenderState

logger = logging.getLogger(__name__)

SCENE_IDS = (1, 2, 3, 4)


class WizardStep(str, Enum):
    """Caller-visible step of a run."""
    INPUT = "input"
    ANALYZING = "analyzing"
    STORYBOARDING = "storyboarding"
    DASHBOARD = "dashboard"
    RENDERING = "rendering"
    COMPLETE = "complete"
    FAILED = "failed"


class SessionEventKind(str, Enum):
    """What changed in a session."""
    STEP = "step"
    ANALYSIS = "analysis"
    SCENES = "scenes"
    PREVIEW = "preview"
    VIDEO = "video"
    ERROR = "error"


@dataclass(frozen=True)
class SessionEvent:
    """Notification sent to subscribers after every write."""

    kind: SessionEventKind
    scene_id: Optional[int] = None


Listener = Callable[[SessionEvent], None]


class Session:
    """In-memory state for one run.

    Mutated only through the write methods below, each of which enforces
    its invariant and then notifies subscribers. Scenes are replaced rather
    than edited so a reader never sees a partially updated scene.
    """

    def __init__(self, source_text: str, brand: BrandConfiguration) -> None:
        self._source_text = source_text
        self._brand = brand
        self._analysis: Optional[EntityAnalysis] = None
        self._scenes: List[Scene] = []
        self._video = VideoRenderState()
        self._step = WizardStep.INPUT
        self._error: Optional[str] = None
        self._listeners: List[Listener] = []

    # Read access

    @property
    def source_text(self) -> str:
        return self._source_text

    @property
    def brand(self) -> BrandConfiguration:
        return self._brand

    @property
    def analysis(self) -> Optional[EntityAnalysis]:
        return self._analysis

    @property
    def scenes(self) -> List[Scene]:
        """Snapshot of the scene list."""
        return list(self._scenes)

    @property
    def video(self) -> VideoRenderState:
        return self._video

    @property
    def step(self) -> WizardStep:
        return self._step

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_dashboard_ready(self) -> bool:
        """Analysis and storyboard are final and displayable."""
        return self._analysis is not None and len(self._scenes) == len(SCENE_IDS)

    @property
    def previews_complete(self) -> bool:
        return self.is_dashboard_ready and all(s.preview_image for s in self._scenes)

    def get_scene(self, scene_id: int) -> Scene:
        for scene in self._scenes:
            if scene.id == scene_id:
                return scene
        raise SessionStateError(f"No scene with id {scene_id}")

    # Observers

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: SessionEventKind, scene_id: Optional[int] = None) -> None:
        event = SessionEvent(kind=kind, scene_id=scene_id)
        for listener in list(self._listeners):
            listener(event)

    # Write points

    def set_step(self, step: WizardStep) -> None:
        self._step = step
        logger.debug(f"Session step -> {step.value}")
        self._emit(SessionEventKind.STEP)

    def fail(self, message: str) -> None:
        """Record a run-level failure."""
        self._error = message
        self._step = WizardStep.FAILED
        self._emit(SessionEventKind.ERROR)

    def set_analysis(self, analysis: EntityAnalysis) -> None:
        if self._analysis is not None:
            raise SessionStateError("Analysis is already set for this run")
        self._analysis = analysis
        self._emit(SessionEventKind.ANALYSIS)

    def set_scenes(self, scenes: List[Scene]) -> None:
        """Install the storyboard.

        Raises:
            SessionStateError: If analysis is missing, scenes are already set,
                or the list is not exactly ids 1-4 with a single CTA.
        """
        if self._analysis is None:
            raise SessionStateError("Analysis must be set before scenes")
        if self._scenes:
            raise SessionStateError("Scenes are already set for this run")

        ids = sorted(scene.id for scene in scenes)
        if tuple(ids) != SCENE_IDS:
            raise SessionStateError(f"Scene ids must be exactly {list(SCENE_IDS)}, got {ids}")

        cta_count = sum(1 for scene in scenes if scene.type == SceneType.CTA)
        if cta_count != 1:
            raise SessionStateError(f"Storyboard needs exactly one CTA scene, got {cta_count}")

        self._scenes = sorted((scene.model_copy() for scene in scenes), key=lambda s: s.id)
        self._emit(SessionEventKind.SCENES)

    def set_scene_preview(self, scene_id: int, image: str) -> None:
        """Write a scene's preview image. Each scene accepts one preview per run."""
        if scene_id not in SCENE_IDS:
            raise SessionStateError(f"Scene id {scene_id} is outside {list(SCENE_IDS)}")

        for index, scene in enumerate(self._scenes):
            if scene.id != scene_id:
                continue
            if scene.preview_image:
                raise SessionStateError(f"Scene {scene_id} already has a preview")
            self._scenes[index] = scene.model_copy(update={"preview_image": image})
            self._emit(SessionEventKind.PREVIEW, scene_id=scene_id)
            return

        raise SessionStateError(f"No scene with id {scene_id}")

    def update_video(self, **changes) -> VideoRenderState:
        """Replace the video state with a validated copy carrying `changes`."""
        fields = self._video.model_dump()
        fields.update(changes)
        try:
            self._video = VideoRenderState(**fields)
        except ValueError as e:
            raise SessionStateError(f"Invalid video state: {e}") from e
        self._emit(SessionEventKind.VIDEO)
        return self._video

    def reset_video(self, **fields) -> VideoRenderState:
        """Replace the video state outright."""
        try:
            self._video = VideoRenderState(**fields)
        except ValueError as e:
            raise SessionStateError(f"Invalid video state: {e}") from e
        self._emit(SessionEventKind.VIDEO)
        return self._video
