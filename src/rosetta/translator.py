"""Translation between vendor message formats.

A translation is two hops through the canonical form: the source adapter
reads the vendor messages into canonical messages, and the target adapter
writes them out again.  The source format is inferred when it is not given.

Usage::

    from rosetta import translate

    result = translate(messages, {"from": "openai_completions", "to": "promptl"})
    result.messages
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rosetta.config import TranslateOptions, TranslatorConfig
from rosetta.core.infer import DEFAULT_INFER_PRIORITY, infer_provider
from rosetta.errors import (
    ConfigurationError,
    SystemNotSupportedError,
    UnsupportedSourceError,
    UnsupportedTargetError,
)
from rosetta.providers.base import SourceAdapter, TargetAdapter
from rosetta.providers.registry import AdapterRegistry, default_registry
from rosetta.utils.telemetry import (
    ATTR_DIRECTION,
    ATTR_HAS_SYSTEM,
    ATTR_INFERRED,
    ATTR_MESSAGE_COUNT,
    ATTR_METADATA_MODE,
    ATTR_SOURCE_PROVIDER,
    ATTR_TARGET_PROVIDER,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

Options = TranslateOptions | Mapping[str, Any] | None


class TranslateResult(BaseModel):
    """Messages (and separated system instructions) in the target format."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    messages: list[Any] = Field(default_factory=lambda: list[Any]())
    system: Any = None


class SafeTranslateResult(BaseModel):
    """Outcome of :meth:`Translator.safe_translate`.

    Exactly one of ``error`` and ``messages`` is set.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    messages: list[Any] | None = None
    system: Any = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Translator:
    """Converts messages between provider formats.

    Usage::

        translator = Translator(TranslatorConfig(infer_priority=["promptl", "genai"]))
        result = translator.translate(messages, to="vercel_ai")
    """

    def __init__(self, config: TranslatorConfig | None = None, *, registry: AdapterRegistry | None = None) -> None:
        self.config = config or TranslatorConfig()
        if self.config.infer_priority is not None and not self.config.infer_priority:
            raise ConfigurationError("Infer priority list cannot be empty if provided")
        self.registry = registry or default_registry()
        self.infer_priority: Sequence[str] = tuple(self.config.infer_priority or DEFAULT_INFER_PRIORITY)

    def translate(self, messages: str | list[Any], options: Options = None, /, **overrides: Any) -> TranslateResult:
        """Translate *messages* from one provider format to another.

        *options* may be a :class:`~rosetta.config.TranslateOptions` or a
        mapping with the keys ``from``, ``to``, ``system``, ``direction`` and
        ``metadata_mode``; keyword arguments override it.

        Raises
        ------
        UnsupportedSourceError
            The source provider is unknown or cannot be read.
        SystemNotSupportedError
            ``system`` was given for a source without separate system instructions.
        UnsupportedTargetError
            The target provider is unknown or cannot be written.
        pydantic.ValidationError
            The messages do not match the source format.
        """
        opts = TranslateOptions.coerce(options, **overrides)
        metadata_mode = opts.metadata_mode or self.config.metadata_mode

        with _tracer.start_as_current_span("rosetta.translate") as span:
            inferred = opts.source is None
            source = opts.source or infer_provider(messages, opts.system, self.infer_priority, self.registry)
            span.set_attribute(ATTR_SOURCE_PROVIDER, source)
            span.set_attribute(ATTR_TARGET_PROVIDER, opts.target)
            span.set_attribute(ATTR_INFERRED, inferred)
            span.set_attribute(ATTR_DIRECTION, opts.direction)
            span.set_attribute(ATTR_METADATA_MODE, metadata_mode)
            span.set_attribute(ATTR_HAS_SYSTEM, opts.system is not None)

            source_adapter = self.registry.get(source)
            if not isinstance(source_adapter, SourceAdapter):
                raise UnsupportedSourceError(source)
            if opts.system is not None and source_adapter.system_schema is None:
                raise SystemNotSupportedError(source)

            canonical = source_adapter.to_canonical(messages, opts.system, opts.direction)

            target_adapter = self.registry.get(opts.target)
            if not isinstance(target_adapter, TargetAdapter):
                raise UnsupportedTargetError(opts.target)

            converted = target_adapter.from_canonical(canonical.messages, opts.direction, metadata_mode)
            span.set_attribute(ATTR_MESSAGE_COUNT, len(converted.messages))

        logger.debug(
            "Translated %d messages from %s to %s (direction=%s, metadata_mode=%s)",
            len(converted.messages),
            source,
            opts.target,
            opts.direction,
            metadata_mode,
        )
        return TranslateResult(messages=converted.messages, system=converted.system)

    def safe_translate(
        self,
        messages: str | list[Any],
        options: Options = None,
        /,
        **overrides: Any,
    ) -> SafeTranslateResult:
        """Like :meth:`translate`, but returns failures in ``error`` instead of raising."""
        try:
            result = self.translate(messages, options, **overrides)
        except Exception as exc:
            logger.debug("Translation failed: %s", exc)
            return SafeTranslateResult(error=exc)
        return SafeTranslateResult(messages=result.messages, system=result.system)


_default = Translator()


def translate(messages: str | list[Any], options: Options = None, /, **overrides: Any) -> TranslateResult:
    """Translate *messages* with the default :class:`Translator`."""
    return _default.translate(messages, options, **overrides)


def safe_translate(messages: str | list[Any], options: Options = None, /, **overrides: Any) -> SafeTranslateResult:
    """Translate *messages* with the default :class:`Translator`, never raising."""
    return _default.safe_translate(messages, options, **overrides)
