"""LLM provider registry with lazy loading.

Usage:
    from candidate_ai.llm import get_provider, extract_json

    provider = get_provider("gemini")
    raw = await provider.complete(prompt, response_schema=schema)
    data = extract_json(raw)
"""

from candidate_ai.llm.base import LLMProvider, extract_json

__all__ = ["LLMProvider", "available_providers", "extract_json", "get_provider"]

# Lazy registry: maps provider name -> (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "anthropic": ("candidate_ai.llm.anthropic", "AnthropicProvider"),
    "gemini": ("candidate_ai.llm.gemini", "GeminiProvider"),
    "openai": ("candidate_ai.llm.openai", "OpenAIProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Args:
        name: Provider identifier (anthropic, gemini, openai).

    Returns:
        An LLMProvider instance.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]

    import importlib

    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
