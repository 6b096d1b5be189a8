"""Google Gemini / Veo API client wrapper via the google-genai SDK."""

import asyncio
import base64
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import requests
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..config import config
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    """Status of a Veo generation operation."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ImageResult:
    """Result of a still image generation."""

    prompt: str
    data: Optional[bytes] = None
    mime_type: str = "image/png"
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def data_uri(self) -> Optional[str]:
        if not self.data:
            return None
        return to_data_uri(self.data, self.mime_type)


@dataclass
class GenerationResult:
    """Result of a Veo generation operation."""

    operation_id: str
    status: GenerationStatus
    output_uri: Optional[str] = None
    video: Optional[bytes] = None
    mime_type: str = "video/mp4"
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)


def to_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> bytes:
    """Decode a base64 data URI back to bytes.

    Raises:
        ValueError: If `uri` is not a base64 data URI.
    """
    if not uri.startswith("data:") or ";base64," not in uri:
        raise ValueError(f"Not a base64 data URI: {uri[:40]}")
    return base64.b64decode(uri.split(";base64,", 1)[1])


class GeminiClient:
    """Client wrapper for Gemini text/image generation and Veo video generation.

    This client handles:
    - Structured JSON text generation
    - Inline image generation
    - Submitting Veo jobs and polling them to completion
    - Downloading the generated video asset
    """

    DEFAULT_MAX_RETRIES = 3
    DEFAULT_RETRY_DELAY = 2.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        text_model: Optional[str] = None,
        image_model: Optional[str] = None,
        video_model: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_poll_time: Optional[float] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        client: Optional[Any] = None,
    ) -> None:
        """Initialize the Gemini client.

        Args:
            api_key: Gemini API key. Defaults to GEMINI_API_KEY / API_KEY env var.
            text_model: Model for structured text. Defaults to config.text_model.
            image_model: Model for preview stills. Defaults to config.image_model.
            video_model: Veo model. Defaults to config.video_model.
            poll_interval: Seconds between job status checks. Defaults to config.poll_interval.
            max_poll_time: Give up on a video job after this many seconds.
                None waits until the job reports done.
            max_retries: Download attempts for the finished video asset.
            retry_delay: Base delay between download retries (exponential backoff).
            client: Pre-built genai client, mainly for tests.

        Raises:
            ConfigurationError: If no API key is available.
        """
        self._api_key = api_key or config.gemini_api_key
        if not self._api_key:
            raise ConfigurationError(
                "Gemini API key not provided. Set GEMINI_API_KEY env var."
            )

        self._client = client or genai.Client(api_key=self._api_key)
        self._text_model = text_model or config.text_model
        self._image_model = image_model or config.image_model
        self._video_model = video_model or config.video_model
        self._poll_interval = poll_interval if poll_interval is not None else config.poll_interval
        self._max_poll_time = max_poll_time
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @property
    def text_model(self) -> str:
        """Return the text model being used."""
        return self._text_model

    @property
    def image_model(self) -> str:
        return self._image_model

    @property
    def video_model(self) -> str:
        return self._video_model

    async def generate_json(
        self,
        prompt: str,
        response_schema: dict,
        temperature: float = 0.7,
    ) -> str:
        """Ask the text model for JSON matching `response_schema`.

        Returns:
            The raw response text, or an empty string if the model returned none.

        Raises:
            genai_errors.APIError: If the API request fails.
        """
        logger.debug(f"Sending JSON request to {self._text_model} (prompt length {len(prompt)})")

        response = await self._client.aio.models.generate_content(
            model=self._text_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=temperature,
                response_mime_type="application/json",
                response_schema=response_schema,
            ),
        )
        return response.text or ""

    async def generate_image(
        self,
        prompt: str,
        aspect_ratio: Optional[str] = None,
    ) -> ImageResult:
        """Generate a still image from a text prompt.

        Failures are reported through `ImageResult.error_message`.
        """
        result = ImageResult(prompt=prompt, created_at=datetime.now())

        try:
            logger.info(f"Generating image with {self._image_model}: {prompt[:50]}...")
            response = await self._client.aio.models.generate_content(
                model=self._image_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(
                        aspect_ratio=aspect_ratio or config.aspect_ratio,
                    ),
                ),
            )
        except Exception as e:
            logger.error(f"Image generation failed: {e}")
            result.error_message = str(e)
            return result

        candidates = response.candidates or []
        parts = []
        if candidates and candidates[0].content:
            parts = candidates[0].content.parts or []

        for part in parts:
            if part.inline_data is not None and part.inline_data.data:
                result.data = part.inline_data.data
                result.mime_type = part.inline_data.mime_type or "image/png"
                return result

        result.error_message = "No image data in response"
        logger.warning(f"Image generation returned no image for: {prompt[:50]}...")
        return result

    async def generate_video(
        self,
        prompt: str,
        aspect_ratio: Optional[str] = None,
        resolution: Optional[str] = None,
    ) -> GenerationResult:
        """Generate a video clip from a text prompt.

        Submits the job, polls it until done, then fetches the asset.

        Returns:
            GenerationResult with final status, and the video bytes on success.

        Raises:
            ValueError: If prompt is empty.
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")

        result = GenerationResult(
            operation_id=f"veo-{int(time.time())}",
            status=GenerationStatus.PENDING,
            started_at=datetime.now(),
            metadata={
                "model": self._video_model,
                "aspect_ratio": aspect_ratio or config.aspect_ratio,
                "resolution": resolution or config.video_resolution,
            },
        )

        try:
            logger.info(f"Starting Veo generation with {self._video_model}")
            logger.debug(f"Prompt: {prompt[:100]}...")

            operation = await self._client.aio.models.generate_videos(
                model=self._video_model,
                prompt=prompt,
                config=types.GenerateVideosConfig(
                    number_of_videos=1,
                    resolution=result.metadata["resolution"],
                    aspect_ratio=result.metadata["aspect_ratio"],
                ),
            )
            if getattr(operation, "name", None):
                result.operation_id = operation.name
            result.status = GenerationStatus.PROCESSING

            operation = await self._poll_operation(operation, result)
            if result.status == GenerationStatus.FAILED:
                return result

            video = self._first_video(operation)
            if video is None:
                return self._fail(result, "Video generation returned no video")

            if getattr(video, "video_bytes", None):
                result.video = video.video_bytes
            elif getattr(video, "uri", None):
                result.output_uri = video.uri
                result.video = await asyncio.to_thread(self._download, video.uri)
            else:
                return self._fail(result, "Video generation failed to return a URI")

            if getattr(video, "mime_type", None):
                result.mime_type = video.mime_type

            result.status = GenerationStatus.COMPLETED
            result.completed_at = datetime.now()
            logger.info(f"Veo generation {result.operation_id} completed")
            return result

        except genai_errors.APIError as e:
            logger.error(f"API error: {e}")
            return self._fail(result, str(e))

        except requests.RequestException as e:
            logger.error(f"Video download failed: {e}")
            return self._fail(result, f"Download failed: {e}")

    async def _poll_operation(self, operation: Any, result: GenerationResult) -> Any:
        """Poll an operation until it reports done, or until max_poll_time."""
        start_time = time.monotonic()
        poll_count = 0

        while not operation.done:
            elapsed = time.monotonic() - start_time
            if self._max_poll_time is not None and elapsed > self._max_poll_time:
                logger.warning(f"Operation {result.operation_id} timed out after {elapsed:.1f}s")
                self._fail(result, f"Operation timed out after {self._max_poll_time}s")
                return operation

            await asyncio.sleep(self._poll_interval)
            poll_count += 1
            logger.debug(f"Polling operation (attempt {poll_count}): {result.operation_id}")
            operation = await self._client.aio.operations.get(operation)

        error = getattr(operation, "error", None)
        if error:
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            logger.error(f"Operation {result.operation_id} failed: {message}")
            self._fail(result, message)

        return operation

    @staticmethod
    def _first_video(operation: Any) -> Optional[Any]:
        response = getattr(operation, "response", None) or getattr(operation, "result", None)
        generated = getattr(response, "generated_videos", None) if response else None
        if not generated:
            return None
        return generated[0].video

    @staticmethod
    def _fail(result: GenerationResult, message: str) -> GenerationResult:
        result.status = GenerationStatus.FAILED
        result.error_message = message
        result.completed_at = datetime.now()
        return result

    def _download(self, uri: str) -> bytes:
        """Download a generated asset, authenticating with the API key."""
        for attempt in range(self._max_retries):
            try:
                response = requests.get(uri, params={"key": self._api_key}, timeout=120)
                response.raise_for_status()
                logger.debug(f"Downloaded {len(response.content)} bytes from {uri}")
                return response.content

            except requests.RequestException as e:
                if attempt == self._max_retries - 1:
                    raise
                delay = self._retry_delay * (2**attempt)
                logger.warning(f"Download failed (attempt {attempt + 1}): {e}. Retrying in {delay}s...")
                time.sleep(delay)

        raise requests.RequestException(f"Download of {uri} did not run")
