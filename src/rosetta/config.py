"""Translator configuration and per-call options."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rosetta.core.metadata import MetadataMode

Direction = Literal["input", "output"]


class TranslatorConfig(BaseModel):
    """Configuration of a :class:`~rosetta.translator.Translator`.

    ``infer_priority`` overrides the order in which providers are tried when
    the source format is inferred.  ``None`` uses the built-in order; an empty
    list is rejected by the translator.
    """

    infer_priority: list[str] | None = None
    metadata_mode: MetadataMode = "preserve"

    @field_validator("infer_priority", mode="before")
    @classmethod
    def _provider_values(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [_enum_value(item) for item in value]
        return value


class TranslateOptions(BaseModel):
    """Options of a single translation call.

    Accepts ``from``/``to`` as aliases of ``source``/``target`` so plain dicts
    read naturally: ``{"from": "promptl", "to": "genai"}``.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    source: str | None = Field(default=None, alias="from")
    target: str = Field(default="genai", alias="to")
    system: Any = None
    direction: Direction = "input"
    metadata_mode: MetadataMode | None = None

    @field_validator("source", "target", mode="before")
    @classmethod
    def _provider_value(cls, value: Any) -> Any:
        return _enum_value(value)

    @classmethod
    def coerce(
        cls,
        options: TranslateOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> TranslateOptions:
        """Build options from a model, a mapping and/or keyword overrides."""
        if isinstance(options, TranslateOptions):
            if not overrides:
                return options
            data: dict[str, Any] = options.model_dump(exclude_unset=True)
        else:
            data = {_ALIASES.get(key, key): value for key, value in (options or {}).items()}
        for key, value in overrides.items():
            data[_ALIASES.get(key, key)] = value
        return cls.model_validate(data)


_ALIASES: dict[str, str] = {"from": "source", "from_": "source", "to": "target"}


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value
