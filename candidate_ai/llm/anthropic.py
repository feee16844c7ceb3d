"""Anthropic Claude LLM provider."""

import json
import logging
import os
from typing import Any

from candidate_ai.llm.base import SYSTEM_PROMPT, LLMProvider, to_json_schema

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """LLM provider using the Anthropic Messages API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> str:
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for Claude evaluation. "
                "Install with: pip install 'candidate-ai[anthropic]'"
            )
            raise ImportError(msg) from None

        client = anthropic.AsyncAnthropic(api_key=api_key)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT
        if response_schema is not None:
            use_system += (
                "\n\nThe JSON object must match this schema:\n"
                + json.dumps(to_json_schema(response_schema))
            )

        logger.info("Sending to Claude API (%s)...", use_model)
        message = await client.messages.create(
            model=use_model,
            max_tokens=1024,
            system=use_system,
            messages=[{"role": "user", "content": prompt}],
        )

        return message.content[0].text  # type: ignore[union-attr]
