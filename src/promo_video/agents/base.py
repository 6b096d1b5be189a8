"""Base agent abstraction."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar, Optional

from ..services.gemini import GeminiClient

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for structured-output agents.

    Provides shared functionality for agents that ask Gemini for JSON.
    Subclasses must implement `run` and define their response schema.
    """

    def __init__(self, client: Optional[GeminiClient] = None) -> None:
        """Initialize the agent.

        Args:
            client: GeminiClient instance. Created if not provided.
        """
        self._client = client or GeminiClient()
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @property
    @abstractmethod
    def response_schema(self) -> dict:
        """Return the JSON schema the model must answer with."""
        ...

    @abstractmethod
    async def run(self, input_data: InputT) -> OutputT:
        """Execute the agent's main task.

        Args:
            input_data: Input data for the agent.

        Returns:
            Structured output from the agent.
        """
        ...

    async def _generate(self, prompt: str, temperature: float = 0.7) -> Any:
        """Send the prompt with this agent's schema and decode the JSON answer.

        Returns:
            The decoded JSON value.

        Raises:
            ValueError: If the response is empty or not valid JSON.
            google.genai.errors.APIError: If the API request fails.
        """
        self._logger.debug(f"Generating with prompt length: {len(prompt)}")

        response = await self._client.generate_json(
            prompt=prompt,
            response_schema=self.response_schema,
            temperature=temperature,
        )
        if not response.strip():
            raise ValueError("Empty response from model")

        self._logger.debug(f"Received response of length: {len(response)}")
        json_str = self._extract_json(response)
        try:
            return json.loads(json_str)
        except json.JSONDecodeError as e:
            self._logger.debug(f"Raw response: {response}")
            raise ValueError(f"Invalid JSON in response: {e}") from e

    @staticmethod
    def _extract_json(response: str) -> str:
        """Extract JSON from a response that may contain markdown or other text."""
        # Try to find JSON in code blocks
        if "```json" in response:
            start = response.find("```json") + 7
            end = response.find("```", start)
            if end > start:
                return response[start:end].strip()

        if "```" in response:
            start = response.find("```") + 3
            end = response.find("```", start)
            if end > start:
                return response[start:end].strip()

        return response.strip()
