"""Storyboard pipeline: analysis, storyboard, scene previews and the final render."""

import asyncio
import contextlib
import logging
from typing import AsyncIterator, Optional

from .config import config
from .errors import (
    PromoVideoError,
    SessionStateError,
    StoryboardError,
    ValidationError,
    VideoError,
)
from .generation import GenerationClient
from .models import BrandConfiguration, Scene, Session, VideoRenderState, WizardStep

logger = logging.getLogger(__name__)

PREVIEW_STYLE = "professional product photography"


def build_preview_prompt(scene: Scene, mood: str) -> str:
    """Composite prompt for a scene preview still."""
    return f"{scene.visual_prompt}, style: {mood}, {PREVIEW_STYLE}"


def build_video_prompt(session: Session) -> str:
    """Composite prompt describing the whole storyboard as one commercial."""
    mood = session.analysis.mood if session.analysis else ""
    lines = [f"Create a cinematic {mood} commercial.", "Sequence:"]
    lines.extend(f"{scene.id}. {scene.visual_prompt}" for scene in session.scenes)
    lines.append(f"Smooth transitions. Brand color theme: {session.brand.primary_color}.")
    return "\n".join(lines)


@contextlib.asynccontextmanager
async def progress_ticker(
    session: Session,
    interval: float,
    step: int,
    cap: int,
) -> AsyncIterator[asyncio.Task]:
    """Bump the cosmetic render progress on a timer while the block runs.

    The ticker task is cancelled and awaited on every exit from the block.
    """

    async def tick() -> None:
        while True:
            await asyncio.sleep(interval)
            progress = session.video.progress
            if session.video.is_generating and progress < cap:
                session.update_video(progress=min(progress + step, cap))

    task = asyncio.create_task(tick())
    try:
        yield task
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


class StoryboardPipeline:
    """Drives one session through the generation stages.

    Usage:
        pipeline = StoryboardPipeline(GenerationClient())
        session = await pipeline.start(text, BrandConfiguration(primary_color="#8b5cf6"))
        await pipeline.fill_previews()
        await pipeline.render_video()

    All stages run on the caller's event loop. Progress is observed through
    `Session.subscribe`.
    """

    def __init__(
        self,
        client: GenerationClient,
        progress_interval: Optional[float] = None,
        progress_step: Optional[int] = None,
        progress_cap: Optional[int] = None,
    ) -> None:
        self._client = client
        self._progress_interval = progress_interval or config.progress_interval
        self._progress_step = progress_step or config.progress_step
        self._progress_cap = progress_cap or config.progress_cap
        self._session: Optional[Session] = None
        self._filling = False

    @property
    def session(self) -> Optional[Session]:
        """The current session, or None before the first start."""
        return self._session

    def _require_dashboard(self) -> Session:
        if self._session is None or not self._session.is_dashboard_ready:
            raise SessionStateError("Storyboard is not ready; call start() first")
        return self._session

    async def start(
        self,
        text: str,
        brand: Optional[BrandConfiguration] = None,
    ) -> Session:
        """Analyze the copy and expand it into the storyboard.

        Replaces any previous session.

        Raises:
            ValidationError: If `text` is empty. No request is made.
            AnalysisError: If analysis fails. The session keeps no analysis.
            StoryboardError: If the storyboard fails. The session keeps no scenes.
        """
        brand = brand or BrandConfiguration()
        session = Session(source_text=text, brand=brand)
        self._session = session
        self._filling = False

        if not text or not text.strip():
            error = ValidationError("Marketing text cannot be empty")
            session.fail(str(error))
            raise error

        session.set_step(WizardStep.ANALYZING)
        try:
            analysis = await self._client.analyze(text)
        except PromoVideoError as e:
            logger.error(f"Analysis failed: {e}")
            session.fail(str(e))
            raise
        session.set_analysis(analysis)

        session.set_step(WizardStep.STORYBOARDING)
        try:
            scenes = await self._client.expand_storyboard(
                analysis, brand.primary_color, source_text=text
            )
            session.set_scenes(scenes)
        except SessionStateError as e:
            logger.error(f"Storyboard rejected: {e}")
            session.fail(str(e))
            raise StoryboardError(f"Storyboard rejected: {e}") from e
        except PromoVideoError as e:
            logger.error(f"Storyboard failed: {e}")
            session.fail(str(e))
            raise

        session.set_step(WizardStep.DASHBOARD)
        logger.info(f"Storyboard ready for '{analysis.product_name}'")
        return session

    async def fill_previews(self) -> Session:
        """Render a preview for every scene without one, in id order.

        Sequential on purpose; each preview is written to the session before
        the next request. A second call while one is running returns at once.
        """
        session = self._require_dashboard()
        if self._filling:
            logger.debug("Preview fill already running")
            return session

        self._filling = True
        try:
            mood = session.analysis.mood
            for scene in session.scenes:
                if scene.preview_image:
                    continue
                logger.info(f"Rendering preview for scene {scene.id} ({scene.type.value})")
                image = await self._client.synthesize_preview(build_preview_prompt(scene, mood))
                session.set_scene_preview(scene.id, image)
        finally:
            self._filling = False
        return session

    async def render_video(self) -> VideoRenderState:
        """Render the final video from the storyboard.

        A call while a render is in flight does nothing. Failures are recorded
        in the video state and leave analysis and scenes untouched.
        """
        session = self._require_dashboard()
        if session.video.is_generating:
            logger.debug("Render already in flight, ignoring trigger")
            return session.video

        session.reset_video(is_generating=True, progress=10)
        session.set_step(WizardStep.RENDERING)
        prompt = build_video_prompt(session)

        try:
            async with progress_ticker(
                session,
                interval=self._progress_interval,
                step=self._progress_step,
                cap=self._progress_cap,
            ):
                reference = await self._client.synthesize_video(prompt)
        except VideoError as e:
            logger.error(f"Video render failed: {e}")
            session.reset_video(is_generating=False, progress=0, error=f"Failed to generate video: {e}")
            session.set_step(WizardStep.DASHBOARD)
            return session.video
        except Exception as e:
            logger.exception(f"Unexpected error during video render: {e}")
            session.reset_video(
                is_generating=False,
                progress=0,
                error="Failed to generate video. Please try again.",
            )
            session.set_step(WizardStep.DASHBOARD)
            return session.video

        session.reset_video(is_generating=False, progress=100, video_reference=reference)
        session.set_step(WizardStep.COMPLETE)
        logger.info("Video render complete")
        return session.video

    async def run(
        self,
        text: str,
        brand: Optional[BrandConfiguration] = None,
        render: bool = False,
    ) -> Session:
        """Start, fill every preview, then optionally render the video."""
        session = await self.start(text, brand)
        await self.fill_previews()
        if render:
            await self.render_video()
        return session
