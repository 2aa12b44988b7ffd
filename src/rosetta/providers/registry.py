"""Provider ids and the registry that maps them to adapters."""

from __future__ import annotations

from enum import Enum
from typing import Any

from rosetta.providers.anthropic import AnthropicAdapter
from rosetta.providers.compat import CompatAdapter
from rosetta.providers.genai import GenAIAdapter
from rosetta.providers.google import GoogleAdapter
from rosetta.providers.openai_completions import OpenAICompletionsAdapter
from rosetta.providers.openai_responses import OpenAIResponsesAdapter
from rosetta.providers.promptl import PromptlAdapter
from rosetta.providers.vercel_ai import VercelAIAdapter


class Provider(str, Enum):
    """Ids of the built-in adapters."""

    GENAI = "genai"
    PROMPTL = "promptl"
    OPENAI_COMPLETIONS = "openai_completions"
    OPENAI_RESPONSES = "openai_responses"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    VERCEL_AI = "vercel_ai"
    COMPAT = "compat"


class AdapterRegistry:
    """Maps provider ids to adapter instances.

    Adapters are looked up by their ``provider`` attribute.  Registering an
    adapter under an id that is already taken replaces the previous one.
    """

    def __init__(self, adapters: list[Any] | None = None) -> None:
        self._adapters: dict[str, Any] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: Any) -> None:
        """Register *adapter* under its ``provider`` id."""
        self._adapters[_provider_id(adapter.provider)] = adapter

    def get(self, provider: str | Provider) -> Any | None:
        """Adapter registered for *provider*, or ``None``."""
        return self._adapters.get(_provider_id(provider))

    def providers(self) -> list[str]:
        """Registered provider ids in registration order."""
        return list(self._adapters)

    def __contains__(self, provider: object) -> bool:
        return isinstance(provider, str) and _provider_id(provider) in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)


_default_registry: AdapterRegistry | None = None


def default_registry() -> AdapterRegistry:
    """Return (and cache) the registry of built-in adapters."""
    global _default_registry
    if _default_registry is None:
        _default_registry = AdapterRegistry(
            [
                GenAIAdapter(),
                PromptlAdapter(),
                OpenAICompletionsAdapter(),
                OpenAIResponsesAdapter(),
                AnthropicAdapter(),
                GoogleAdapter(),
                VercelAIAdapter(),
                CompatAdapter(),
            ]
        )
    return _default_registry


def get_adapter(provider: str | Provider) -> Any | None:
    """Built-in adapter for *provider*, or ``None`` when the id is unknown."""
    return default_registry().get(provider)


def _provider_id(provider: str | Provider) -> str:
    return provider.value if isinstance(provider, Provider) else provider
