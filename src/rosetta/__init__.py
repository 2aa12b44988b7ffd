"""Rosetta: translate LLM chat messages between provider formats."""

from __future__ import annotations

from rosetta.config import Direction, TranslateOptions, TranslatorConfig
from rosetta.core.infer import DEFAULT_INFER_PRIORITY, infer_provider
from rosetta.core.metadata import KnownFields, MetadataEnvelope, MetadataMode
from rosetta.core.models import (
    BlobPart,
    CanonicalMessage,
    CanonicalPart,
    FilePart,
    GenericPart,
    ReasoningPart,
    TextPart,
    ToolCallPart,
    ToolCallResponsePart,
    UriPart,
)
from rosetta.errors import (
    ConfigurationError,
    SystemNotSupportedError,
    TranslationError,
    UnsupportedDirectionError,
    UnsupportedSourceError,
    UnsupportedTargetError,
)
from rosetta.providers.registry import Provider
from rosetta.translator import SafeTranslateResult, TranslateResult, Translator, safe_translate, translate

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_INFER_PRIORITY",
    "BlobPart",
    "CanonicalMessage",
    "CanonicalPart",
    "ConfigurationError",
    "Direction",
    "FilePart",
    "GenericPart",
    "KnownFields",
    "MetadataEnvelope",
    "MetadataMode",
    "Provider",
    "ReasoningPart",
    "SafeTranslateResult",
    "SystemNotSupportedError",
    "TextPart",
    "ToolCallPart",
    "ToolCallResponsePart",
    "TranslateOptions",
    "TranslateResult",
    "TranslationError",
    "Translator",
    "TranslatorConfig",
    "UnsupportedDirectionError",
    "UnsupportedSourceError",
    "UnsupportedTargetError",
    "UriPart",
    "__version__",
    "infer_provider",
    "safe_translate",
    "translate",
]
