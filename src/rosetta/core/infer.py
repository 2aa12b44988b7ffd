"""Source-format inference.

Inference tries each adapter's schema in priority order and picks the first
one that validates.  The ``compat`` adapter accepts any list of objects, so
inference always yields a provider for well-formed input.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from rosetta.errors import ConfigurationError
from rosetta.utils.telemetry import ATTR_INFERRED, ATTR_MESSAGE_COUNT, ATTR_SOURCE_PROVIDER, get_tracer

if TYPE_CHECKING:
    from rosetta.providers.registry import AdapterRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

FALLBACK_PROVIDER = "compat"

DEFAULT_INFER_PRIORITY: tuple[str, ...] = (
    "openai_completions",
    "openai_responses",
    "anthropic",
    "google",
    "vercel_ai",
    "genai",
    "promptl",
    FALLBACK_PROVIDER,
)


def infer_provider(
    messages: str | Sequence[Any],
    system: Any = None,
    priority: Sequence[str] = DEFAULT_INFER_PRIORITY,
    registry: AdapterRegistry | None = None,
) -> str:
    """Return the id of the first adapter in *priority* that accepts the input.

    Lookup order:
    1. A string *messages* is valid for any adapter: the first in *priority*.
    2. A non-empty message list: the first adapter whose message schema
       validates it.
    3. A string *system*: the first in *priority*.
    4. Any other *system*: the first adapter whose system schema validates it.
    5. ``compat``.

    Ids in *priority* that have no registered adapter are skipped.  Raises
    :class:`~rosetta.errors.ConfigurationError` when *priority* is empty.
    """
    if not priority:
        raise ConfigurationError("Infer priority list cannot be empty if provided")
    if registry is None:
        from rosetta.providers.registry import default_registry

        registry = default_registry()

    with _tracer.start_as_current_span("rosetta.infer") as span:
        span.set_attribute(ATTR_MESSAGE_COUNT, 1 if isinstance(messages, str) else len(messages))
        provider = _infer(messages, system, priority, registry)
        span.set_attribute(ATTR_SOURCE_PROVIDER, provider)
        span.set_attribute(ATTR_INFERRED, True)
        logger.debug("Inferred source provider %s", provider)
        return provider


def _infer(
    messages: str | Sequence[Any],
    system: Any,
    priority: Sequence[str],
    registry: AdapterRegistry,
) -> str:
    if isinstance(messages, str):
        return priority[0]

    if messages:
        for provider in priority:
            adapter = _lookup(registry, provider)
            if adapter is not None and _validates(adapter.message_schema, messages):
                return provider

    if isinstance(system, str):
        return priority[0]

    if system is not None:
        for provider in priority:
            adapter = _lookup(registry, provider)
            schema = getattr(adapter, "system_schema", None)
            if schema is not None and _validates(schema, system):
                return provider

    return FALLBACK_PROVIDER


def _lookup(registry: AdapterRegistry, provider: str) -> Any | None:
    adapter = registry.get(provider)
    if adapter is None:
        logger.debug("Skipping unknown provider %s in infer priority", provider)
    return adapter


def _validates(schema: Any, value: Any) -> bool:
    try:
        schema.validate_python(value)
    except ValidationError:
        return False
    return True
