"""Abstract base class for LLM providers and shared logic."""

import json
import re
from abc import ABC, abstractmethod
from typing import Any

SYSTEM_PROMPT = (
    "You are a senior talent assessor. Evaluate job candidates across three "
    "dimensions: Crisis Management, Sustainability Knowledge, and Team Motivation.\n\n"
    "Return ONLY a JSON object (no markdown, no explanation) with these fields:\n"
    "- crisisManagementScore (number): 0-100\n"
    "- sustainabilityScore (number): 0-100\n"
    "- teamMotivationScore (number): 0-100\n"
    "- summary (string): a concise overall summary of the candidate's potential"
)


def extract_json(raw_text: str) -> Any:
    """Parse an LLM response as JSON.

    Handles markdown-wrapped JSON (```json ... ```) and plain JSON.
    """
    cleaned = re.sub(r"^```(?:json)?\s*\n?", "", raw_text.strip())
    cleaned = re.sub(r"\n?```\s*$", "", cleaned)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse LLM response as JSON: {e}"
        raise ValueError(msg) from e


def to_json_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Convert a Gemini-style schema (``"type": "OBJECT"``) to plain JSON Schema.

    Type names are lowercased and objects are closed with
    ``additionalProperties: false`` so strict structured output accepts them.
    """
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type" and isinstance(value, str):
            converted[key] = value.lower()
        elif key == "properties":
            converted[key] = {name: to_json_schema(sub) for name, sub in value.items()}
        elif key == "items" and isinstance(value, dict):
            converted[key] = to_json_schema(value)
        else:
            converted[key] = value
    if converted.get("type") == "object":
        converted.setdefault("additionalProperties", False)
    return converted


class LLMProvider(ABC):
    """Base class that every LLM provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'gemini')."""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        """Send a prompt to the LLM and return raw response text.

        Args:
            prompt: User prompt describing the candidate.
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.
            response_schema: Gemini-style schema the response must follow.
                Gemini and OpenAI enforce it through structured output;
                Anthropic receives it in the system prompt.

        Returns:
            Raw text response from the LLM (expected to be JSON).
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
