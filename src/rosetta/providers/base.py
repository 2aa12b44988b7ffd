"""Adapter protocol: converts between vendor message formats and the canonical model.

Every provider has an adapter that can read its format into canonical
messages (``to_canonical``).  Adapters that can also write their format
implement ``from_canonical``.  The translator checks these capabilities with
the runtime-checkable protocols below rather than by inheritance.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from rosetta.config import Direction
from rosetta.core.metadata import (
    ENVELOPE_KEYS,
    KnownFields,
    MetadataEnvelope,
    MetadataMode,
    apply_output_mode,
    build_envelope,
    drop_known_fields,
    get_known_fields,
    read_envelope,
)
from rosetta.core.models import CanonicalMessage, GenericPart, TextPart, ToolCallPart
from rosetta.utils.fields import extract_extra_fields


class ToCanonicalResult(BaseModel):
    """Messages produced by :meth:`SourceAdapter.to_canonical`."""

    messages: list[CanonicalMessage]


class FromCanonicalResult(BaseModel):
    """Vendor-shaped messages produced by :meth:`TargetAdapter.from_canonical`.

    ``system`` is only set by formats that carry system instructions
    separately from the message list.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    messages: list[Any] = Field(default_factory=lambda: list[Any]())
    system: Any = None


@runtime_checkable
class SourceAdapter(Protocol):
    """An adapter that can read its vendor format into canonical messages."""

    provider: str
    name: str
    message_schema: TypeAdapter[Any]
    system_schema: TypeAdapter[Any] | None

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        """Convert vendor *messages* (and optional *system*) to canonical form.

        A bare string is shorthand for a single text message whose role
        follows *direction*.  Raises :class:`pydantic.ValidationError` when the
        input does not match the vendor schema.
        """
        ...


@runtime_checkable
class TargetAdapter(Protocol):
    """An adapter that can write canonical messages in its vendor format."""

    provider: str
    name: str

    def from_canonical(
        self,
        messages: list[CanonicalMessage],
        direction: Direction = "input",
        metadata_mode: MetadataMode = "preserve",
    ) -> FromCanonicalResult:
        """Convert canonical *messages* to the vendor format."""
        ...


# ---------------------------------------------------------------------------
# Helpers shared by adapters
# ---------------------------------------------------------------------------


def shorthand_role(direction: Direction) -> str:
    """Role of the message a bare string stands for."""
    return "user" if direction == "input" else "assistant"


def vendor_envelope(
    source: BaseModel | Mapping[str, Any] | None,
    known: KnownFields | Mapping[str, Any] | None = None,
    *,
    exclude: tuple[str, ...] = (),
) -> MetadataEnvelope | None:
    """Envelope for a validated vendor entity.

    An envelope already attached to the entity is read first; every field
    the vendor schema does not model is then routed into it (allow-listed
    keys as known fields, the rest opaque).  Keys in *exclude* are consumed by
    the adapter and skipped.
    """
    if source is None:
        extras: dict[str, Any] = {}
    elif isinstance(source, BaseModel):
        extras = extract_extra_fields(source.model_extra or {}, exclude)
    else:
        extras = extract_extra_fields(source, exclude)
    return build_envelope(read_envelope(extras), extras, known)


def compact(**fields: Any) -> dict[str, Any]:
    """Keyword arguments as a dict, without the ones that are ``None``."""
    return {key: value for key, value in fields.items() if value is not None}


def strip_envelope_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of *data* without metadata container keys."""
    return {key: value for key, value in data.items() if key not in ENVELOPE_KEYS}


def generic_as_text(part: GenericPart) -> tuple[str, MetadataEnvelope | None] | None:
    """Text stand-in for a generic part with string ``content``.

    The generic type is recorded as the ``original_type`` known field so
    :func:`text_or_generic` can restore it; remaining payload fields go to
    the opaque bag.  Returns ``None`` when the part has no text content.
    """
    extras = part.extra_fields
    content = extras.pop("content", None)
    if not isinstance(content, str):
        return None
    envelope = build_envelope(part.provider_metadata, extras, {"original_type": part.type})
    return content, envelope


def text_or_generic(text: str, envelope: MetadataEnvelope | None) -> TextPart | GenericPart:
    """Canonical part for vendor text, undoing :func:`generic_as_text`."""
    original_type = get_known_fields(envelope).original_type
    if not original_type:
        return TextPart(content=text, provider_metadata=envelope)
    return GenericPart.model_validate(
        {
            "type": original_type,
            "content": text,
            "provider_metadata": drop_known_fields(envelope, "original_type"),
        }
    )


def tool_call_names(messages: Iterable[CanonicalMessage]) -> dict[str, str]:
    """Map of tool call id to tool name across *messages*."""
    names: dict[str, str] = {}
    for message in messages:
        for part in message.parts:
            if isinstance(part, ToolCallPart) and part.id:
                names[part.id] = part.name
    return names


def render(
    entity: Mapping[str, Any],
    envelope: MetadataEnvelope | None,
    metadata_mode: MetadataMode,
    *,
    use_alt_key_style: bool = False,
) -> dict[str, Any]:
    """Apply *metadata_mode* to a vendor-shaped entity."""
    return apply_output_mode(entity, envelope, metadata_mode, use_alt_key_style)
