"""Canonical message schema (GenAI) shared by every adapter.

Messages and parts are immutable pydantic models that tolerate unknown
fields.  Vendor-specific data that the schema does not model travels in the
``provider_metadata`` envelope (see :mod:`rosetta.core.metadata`).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, model_validator

from rosetta.core.metadata import (
    ENVELOPE_KEY,
    ENVELOPE_KEYS,
    MetadataEnvelope,
    coerce_envelope,
    combine_envelopes,
    read_envelope,
)

Role = Literal["system", "user", "assistant", "tool"]
Modality = Literal["image", "video", "audio", "document"]
FinishReason = Literal["stop", "length", "content_filter", "tool_call", "error"]

KNOWN_ROLES: tuple[str, ...] = ("system", "user", "assistant", "tool")
KNOWN_MODALITIES: tuple[str, ...] = ("image", "video", "audio", "document")
KNOWN_FINISH_REASONS: tuple[str, ...] = ("stop", "length", "content_filter", "tool_call", "error")


# ---------------------------------------------------------------------------
# Base entity
# ---------------------------------------------------------------------------


class CanonicalEntity(BaseModel):
    """Common behaviour of canonical messages and parts."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    provider_metadata: MetadataEnvelope | None = Field(default=None, alias=ENVELOPE_KEY)

    @model_validator(mode="before")
    @classmethod
    def _normalize_envelope(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        if "provider_metadata" not in data and not any(key in data for key in ENVELOPE_KEYS):
            return data
        raw = dict(data)
        envelope = combine_envelopes(
            coerce_envelope(raw.pop("provider_metadata", None)),
            read_envelope({key: raw.pop(key) for key in ENVELOPE_KEYS if key in raw}),
        )
        if envelope is not None:
            raw["provider_metadata"] = envelope
        return raw

    @property
    def extra_fields(self) -> dict[str, Any]:
        """Fields present on the entity that the schema does not model."""
        return dict(self.model_extra or {})

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict in the canonical wire shape.

        Optional fields that are unset or ``None`` are omitted and an absent
        envelope is not emitted.
        """
        data: dict[str, Any] = {}
        for name, field in type(self).model_fields.items():
            if name == "provider_metadata":
                continue
            value = getattr(self, name)
            if name != "type" and (name not in self.model_fields_set or value is None):
                continue
            data[field.alias or name] = _wire_value(value)
        data.update(self.extra_fields)
        if self.provider_metadata is not None and not self.provider_metadata.is_empty:
            data[ENVELOPE_KEY] = self.provider_metadata.to_container()
        return data


def _wire_value(value: Any) -> Any:
    if isinstance(value, CanonicalEntity):
        return value.to_wire()
    if isinstance(value, list):
        return [_wire_value(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Parts
# ---------------------------------------------------------------------------


class TextPart(CanonicalEntity):
    """Plain text."""

    type: Literal["text"] = "text"
    content: str


class ReasoningPart(CanonicalEntity):
    """Model reasoning / thinking text."""

    type: Literal["reasoning"] = "reasoning"
    content: str


class BlobPart(CanonicalEntity):
    """Inline binary content, base64 encoded."""

    type: Literal["blob"] = "blob"
    modality: str
    mime_type: str | None = None
    content: str


class UriPart(CanonicalEntity):
    """Content referenced by URL."""

    type: Literal["uri"] = "uri"
    modality: str
    mime_type: str | None = None
    uri: str


class FilePart(CanonicalEntity):
    """Content referenced by a provider-side file id."""

    type: Literal["file"] = "file"
    modality: str
    mime_type: str | None = None
    file_id: str


class ToolCallPart(CanonicalEntity):
    """A tool invocation requested by the model."""

    type: Literal["tool_call"] = "tool_call"
    id: str | None = None
    name: str
    arguments: Any = None


class ToolCallResponsePart(CanonicalEntity):
    """The result of a tool invocation.

    ``id`` correlates with a prior :class:`ToolCallPart` when known; the
    correlation is not enforced.
    """

    type: Literal["tool_call_response"] = "tool_call_response"
    id: str | None = None
    response: Any = None


class GenericPart(CanonicalEntity):
    """Open-ended fallback for part types the schema does not model.

    Its payload lives in extra fields next to ``type``.
    """

    type: str


_PART_TYPES: dict[str, type[CanonicalEntity]] = {
    "text": TextPart,
    "reasoning": ReasoningPart,
    "blob": BlobPart,
    "uri": UriPart,
    "file": FilePart,
    "tool_call": ToolCallPart,
    "tool_call_response": ToolCallResponsePart,
}
_GENERIC_TAG = "generic"


def _part_tag(value: Any) -> str:
    if isinstance(value, GenericPart):
        return _GENERIC_TAG
    part_type = value.get("type") if isinstance(value, Mapping) else getattr(value, "type", None)
    if isinstance(part_type, str) and part_type in _PART_TYPES:
        return part_type
    return _GENERIC_TAG


CanonicalPart = Annotated[
    Union[
        Annotated[TextPart, Tag("text")],
        Annotated[ReasoningPart, Tag("reasoning")],
        Annotated[BlobPart, Tag("blob")],
        Annotated[UriPart, Tag("uri")],
        Annotated[FilePart, Tag("file")],
        Annotated[ToolCallPart, Tag("tool_call")],
        Annotated[ToolCallResponsePart, Tag("tool_call_response")],
        Annotated[GenericPart, Tag(_GENERIC_TAG)],
    ],
    Discriminator(_part_tag),
]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class CanonicalMessage(CanonicalEntity):
    """A single message in the canonical format.

    ``role`` is an open vocabulary: vendor roles such as ``developer`` pass
    through untouched.  ``parts`` order is significant.
    """

    role: str
    parts: list[CanonicalPart]
    name: str | None = None
    finish_reason: str | None = None

    @property
    def text(self) -> str:
        """Concatenated content of all text parts."""
        return "".join(part.content for part in self.parts if isinstance(part, TextPart))

    @classmethod
    def from_text(cls, role: str, text: str) -> CanonicalMessage:
        """Create a message holding one text part."""
        return cls(role=role, parts=[TextPart(content=text)])


CanonicalSystem = list[CanonicalPart]

MESSAGE_LIST: TypeAdapter[list[CanonicalMessage]] = TypeAdapter(list[CanonicalMessage])
PART_LIST: TypeAdapter[list[CanonicalPart]] = TypeAdapter(list[CanonicalPart])


def parse_part(value: Any) -> CanonicalPart:
    """Validate a single part mapping into its canonical model."""
    return PART_LIST.validate_python([value])[0]
