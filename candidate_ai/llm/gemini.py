"""Google Gemini LLM provider (google-genai SDK)."""

import logging
import os
from typing import Any

from candidate_ai.core.config import DEFAULT_MODEL
from candidate_ai.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API with JSON-constrained output."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return DEFAULT_MODEL

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        api_key = os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            msg = "GOOGLE_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for Gemini evaluation. "
                "Install with: pip install google-genai"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.info("Sending to Gemini API (%s)...", use_model)
        client = genai.Client(api_key=api_key)
        response = await client.aio.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=use_system,
                response_mime_type="application/json",
                response_schema=response_schema,
            ),
        )

        return response.text or ""
