"""OpenAI LLM provider."""

import logging
import os
from typing import Any

from candidate_ai.llm.base import SYSTEM_PROMPT, LLMProvider, to_json_schema

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI API with JSON or structured output."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o-mini"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for OpenAI evaluation. "
                "Install with: pip install 'candidate-ai[openai]'"
            )
            raise ImportError(msg) from None

        client = openai.AsyncOpenAI(api_key=api_key)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        response_format: dict[str, Any] = {"type": "json_object"}
        if response_schema is not None:
            response_format = {
                "type": "json_schema",
                "json_schema": {
                    "name": "evaluation",
                    "schema": to_json_schema(response_schema),
                    "strict": True,
                },
            }

        logger.info("Sending to OpenAI API (%s)...", use_model)
        response = await client.chat.completions.create(
            model=use_model,
            response_format=response_format,
            messages=[
                {"role": "system", "content": use_system},
                {"role": "user", "content": prompt},
            ],
        )

        return response.choices[0].message.content or ""
