"""Metadata envelope protocol.

Every canonical message and part may carry a :class:`MetadataEnvelope` with
three independent slots:

- *known fields*: a fixed schema (:class:`KnownFields`) adapters use to
  rebuild vendor fields the canonical model does not represent, such as the
  tool name a vendor requires on tool results.
- *opaque fields*: arbitrary vendor data carried verbatim.
- *parts metadata*: part-level metadata parked on a message because the
  target format collapsed several parts into one string.

On the wire the envelope lives under a single container key.  Two spellings
exist and both are accepted on read:

=================  =====================  ===================
slot               underscore style       compact style
=================  =====================  ===================
container          ``_provider_metadata``  ``_providerMetadata``
known fields       ``_known_fields``       ``_knownFields``
parts metadata     ``_parts_metadata``     ``_partsMetadata``
=================  =====================  ===================

When both spellings of a slot are present the underscore-style value wins,
key by key.  Empty envelopes are always represented as ``None``.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Literal, NamedTuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

MetadataMode = Literal["strip", "preserve", "passthrough"]
METADATA_MODES: tuple[str, ...] = ("strip", "preserve", "passthrough")

ENVELOPE_KEY = "_provider_metadata"
ENVELOPE_KEY_COMPACT = "_providerMetadata"
KNOWN_FIELDS_KEY = "_known_fields"
KNOWN_FIELDS_KEY_COMPACT = "_knownFields"
PARTS_METADATA_KEY = "_parts_metadata"
PARTS_METADATA_KEY_COMPACT = "_partsMetadata"

ENVELOPE_KEYS: tuple[str, ...] = (ENVELOPE_KEY, ENVELOPE_KEY_COMPACT)
_RESERVED_KEYS = frozenset(
    {KNOWN_FIELDS_KEY, KNOWN_FIELDS_KEY_COMPACT, PARTS_METADATA_KEY, PARTS_METADATA_KEY_COMPACT}
)

# Vendor field spellings recognised as known fields, mapped to attribute names.
_KNOWN_FIELD_ALIASES: dict[str, str] = {
    "tool_name": "tool_name",
    "toolName": "tool_name",
    "is_error": "is_error",
    "isError": "is_error",
    "is_refusal": "is_refusal",
    "isRefusal": "is_refusal",
    "original_type": "original_type",
    "originalType": "original_type",
    "message_index": "message_index",
    "messageIndex": "message_index",
}
_KNOWN_FIELD_TYPES: dict[str, type] = {
    "tool_name": str,
    "is_error": bool,
    "is_refusal": bool,
    "original_type": str,
    "message_index": int,
}

_Entity = TypeVar("_Entity", bound=BaseModel)


# ---------------------------------------------------------------------------
# Envelope types
# ---------------------------------------------------------------------------


class KnownFields(BaseModel):
    """Cross-vendor fields adapters read and write by name."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    tool_name: str | None = Field(default=None, alias="toolName")
    is_error: bool | None = Field(default=None, alias="isError")
    is_refusal: bool | None = Field(default=None, alias="isRefusal")
    original_type: str | None = Field(default=None, alias="originalType")
    message_index: int | None = Field(default=None, alias="messageIndex")

    def to_wire(self) -> dict[str, Any]:
        """camelCase mapping of the fields that are set."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class MetadataEnvelope(BaseModel):
    """Normalized metadata attached to a canonical message or part.

    Build envelopes through :func:`merge_envelope`, :func:`build_envelope` or
    :meth:`from_container` so that empty slots collapse to ``None``.
    """

    model_config = ConfigDict(frozen=True)

    known: KnownFields | None = None
    opaque: dict[str, Any] = Field(default_factory=dict)
    parts_metadata: MetadataEnvelope | None = None

    @property
    def is_empty(self) -> bool:
        return (
            (self.known is None or self.known.is_empty)
            and not self.opaque
            and (self.parts_metadata is None or self.parts_metadata.is_empty)
        )

    @classmethod
    def from_container(cls, raw: Mapping[str, Any]) -> MetadataEnvelope | None:
        """Parse a wire container written in either key style."""
        known = _merge_known(
            _coerce_known(raw.get(KNOWN_FIELDS_KEY_COMPACT)),
            _coerce_known(raw.get(KNOWN_FIELDS_KEY)),
        )
        parts = combine_envelopes(
            coerce_envelope(raw.get(PARTS_METADATA_KEY_COMPACT)),
            coerce_envelope(raw.get(PARTS_METADATA_KEY)),
        )
        opaque = {key: value for key, value in raw.items() if key not in _RESERVED_KEYS}
        return _make_envelope(known, opaque, parts)

    def to_container(self, *, use_alt_key_style: bool = False) -> dict[str, Any]:
        """Render the envelope as a wire container in one key style."""
        known_key = KNOWN_FIELDS_KEY_COMPACT if use_alt_key_style else KNOWN_FIELDS_KEY
        parts_key = PARTS_METADATA_KEY_COMPACT if use_alt_key_style else PARTS_METADATA_KEY
        container = copy.deepcopy(self.opaque)
        if self.known is not None and not self.known.is_empty:
            container[known_key] = self.known.to_wire()
        if self.parts_metadata is not None and not self.parts_metadata.is_empty:
            container[parts_key] = self.parts_metadata.to_container(use_alt_key_style=use_alt_key_style)
        return container


class SplitFields(NamedTuple):
    """Result of :func:`extract_known_vs_opaque`."""

    known: KnownFields | None
    opaque: dict[str, Any]


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def coerce_envelope(value: Any) -> MetadataEnvelope | None:
    """Accept an envelope instance, a wire container or ``None``."""
    if value is None:
        return None
    if isinstance(value, MetadataEnvelope):
        return None if value.is_empty else value
    if isinstance(value, Mapping):
        return MetadataEnvelope.from_container(value)
    msg = f"metadata container must be an object, got {type(value).__name__}"
    raise ValueError(msg)


def read_envelope(entity: Any) -> MetadataEnvelope | None:
    """Return the envelope attached to *entity*, or ``None`` if it is empty.

    *entity* is a canonical model or a raw mapping carrying the container
    under either spelling.
    """
    if isinstance(entity, BaseModel):
        envelope = getattr(entity, "provider_metadata", None)
        if isinstance(envelope, MetadataEnvelope) and not envelope.is_empty:
            return envelope
        return None
    if not isinstance(entity, Mapping):
        return None
    return combine_envelopes(
        coerce_envelope(entity.get(ENVELOPE_KEY_COMPACT)),
        coerce_envelope(entity.get(ENVELOPE_KEY)),
    )


def get_known_fields(envelope: MetadataEnvelope | None) -> KnownFields:
    """Known fields of *envelope*; an empty :class:`KnownFields` when absent."""
    if envelope is None or envelope.known is None:
        return KnownFields()
    return envelope.known


def extract_known_vs_opaque(raw_extra_fields: Mapping[str, Any]) -> SplitFields:
    """Split vendor extras into known fields and the opaque bag.

    Only keys on the known-field allow-list whose values have the expected
    type are promoted; everything else stays opaque.  Container keys are
    dropped because they are read separately by :func:`read_envelope`.
    """
    known: dict[str, Any] = {}
    opaque: dict[str, Any] = {}
    for key, value in raw_extra_fields.items():
        if key in ENVELOPE_KEYS:
            continue
        field = _KNOWN_FIELD_ALIASES.get(key)
        if field is None or not _fits_known_field(field, value):
            opaque[key] = value
            continue
        # the underscore spelling wins over the camelCase one
        if key == field or field not in known:
            known[field] = value
    return SplitFields(KnownFields(**known) if known else None, opaque)


# ---------------------------------------------------------------------------
# Merging
# ---------------------------------------------------------------------------


def merge_envelope(
    existing: MetadataEnvelope | None,
    new_opaque: Mapping[str, Any] | None = None,
    new_known: KnownFields | Mapping[str, Any] | None = None,
) -> MetadataEnvelope | None:
    """Merge new opaque and known fields into *existing* (new wins per key)."""
    known = _merge_known(existing.known if existing else None, _coerce_known(new_known))
    opaque = {**(existing.opaque if existing else {}), **(new_opaque or {})}
    return _make_envelope(known, opaque, existing.parts_metadata if existing else None)


def build_envelope(
    existing: MetadataEnvelope | None,
    extra_fields: Mapping[str, Any],
    known: KnownFields | Mapping[str, Any] | None = None,
) -> MetadataEnvelope | None:
    """Store vendor *extra_fields* on top of *existing*.

    Allow-listed keys in *extra_fields* become known fields; explicit *known*
    values override them.
    """
    split = extract_known_vs_opaque(extra_fields)
    return merge_envelope(existing, split.opaque, _merge_known(split.known, _coerce_known(known)))


def combine_envelopes(
    base: MetadataEnvelope | None,
    update: MetadataEnvelope | None,
) -> MetadataEnvelope | None:
    """Merge two envelopes slot by slot, *update* winning on conflicts."""
    if base is None or base.is_empty:
        return None if update is None or update.is_empty else update
    if update is None or update.is_empty:
        return base
    return _make_envelope(
        _merge_known(base.known, update.known),
        {**base.opaque, **update.opaque},
        combine_envelopes(base.parts_metadata, update.parts_metadata),
    )


def drop_known_fields(envelope: MetadataEnvelope | None, *names: str) -> MetadataEnvelope | None:
    """Copy of *envelope* without the named known fields."""
    if envelope is None or envelope.known is None:
        return envelope
    remaining = {k: v for k, v in envelope.known.model_dump(exclude_none=True).items() if k not in names}
    return _make_envelope(KnownFields(**remaining), envelope.opaque, envelope.parts_metadata)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def apply_output_mode(
    entity: Mapping[str, Any],
    envelope: MetadataEnvelope | None,
    mode: MetadataMode,
    use_alt_key_style: bool = False,
) -> dict[str, Any]:
    """Render *envelope* onto a vendor-shaped *entity* according to *mode*.

    Always returns a new dict; *entity* is left untouched.

    - ``strip``: no metadata appears in the output.  Adapters may still add
      structural known fields themselves, like the ``messageIndex`` marker
      GenAI writes on system parts.
    - ``preserve``: one container key holds the whole envelope.
    - ``passthrough``: opaque fields become top-level keys; the entity's own
      keys win on conflict and known fields are not emitted.
    """
    if mode not in METADATA_MODES:
        msg = f"Unknown metadata mode: {mode!r}"
        raise ValueError(msg)

    result = {key: value for key, value in entity.items() if key not in ENVELOPE_KEYS}
    if envelope is None or envelope.is_empty or mode == "strip":
        return result

    if mode == "preserve":
        key = ENVELOPE_KEY_COMPACT if use_alt_key_style else ENVELOPE_KEY
        result[key] = envelope.to_container(use_alt_key_style=use_alt_key_style)
        return result

    for key, value in envelope.opaque.items():
        result.setdefault(key, copy.deepcopy(value))
    return result


# ---------------------------------------------------------------------------
# Parts-metadata promotion
# ---------------------------------------------------------------------------


def gather_parts_metadata(envelopes: Iterable[MetadataEnvelope | None]) -> MetadataEnvelope | None:
    """Merge the envelopes of parts about to be collapsed into one string."""
    gathered: MetadataEnvelope | None = None
    for envelope in envelopes:
        gathered = combine_envelopes(gathered, envelope)
    return gathered


def promote_parts_metadata(
    envelope: MetadataEnvelope | None,
    gathered: MetadataEnvelope | None,
) -> MetadataEnvelope | None:
    """Store *gathered* part metadata in the parts-metadata slot of *envelope*."""
    if gathered is None or gathered.is_empty:
        return envelope
    if envelope is None:
        return _make_envelope(None, {}, gathered)
    return _make_envelope(
        envelope.known,
        envelope.opaque,
        combine_envelopes(envelope.parts_metadata, gathered),
    )


def split_parts_metadata(
    envelope: MetadataEnvelope | None,
) -> tuple[MetadataEnvelope | None, MetadataEnvelope | None]:
    """Separate the parts-metadata slot from the rest of *envelope*."""
    if envelope is None or envelope.parts_metadata is None:
        return envelope, None
    return _make_envelope(envelope.known, envelope.opaque, None), envelope.parts_metadata


def restore_parts_metadata(
    envelope: MetadataEnvelope | None,
    parts: Sequence[_Entity],
) -> tuple[MetadataEnvelope | None, list[_Entity]]:
    """Move promoted part metadata back onto the first of *parts*.

    Returns the message envelope without its parts-metadata slot and the
    updated part list.  With no parts to receive it the envelope is returned
    unchanged.
    """
    message_envelope, parts_envelope = split_parts_metadata(envelope)
    restored = list(parts)
    if parts_envelope is None or not restored:
        return envelope, restored
    first = restored[0]
    restored[0] = with_envelope(first, combine_envelopes(parts_envelope, read_envelope(first)))
    return message_envelope, restored


def with_envelope(entity: _Entity, envelope: MetadataEnvelope | None) -> _Entity:
    """Copy of a canonical *entity* carrying *envelope*."""
    return entity.model_copy(update={"provider_metadata": envelope})


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


def _make_envelope(
    known: KnownFields | None,
    opaque: Mapping[str, Any],
    parts: MetadataEnvelope | None,
) -> MetadataEnvelope | None:
    if known is not None and known.is_empty:
        known = None
    if parts is not None and parts.is_empty:
        parts = None
    if known is None and not opaque and parts is None:
        return None
    return MetadataEnvelope(known=known, opaque=dict(opaque), parts_metadata=parts)


def _coerce_known(value: KnownFields | Mapping[str, Any] | None) -> KnownFields | None:
    if value is None or isinstance(value, KnownFields):
        return value
    if not isinstance(value, Mapping):
        msg = f"known fields must be an object, got {type(value).__name__}"
        raise ValueError(msg)
    return KnownFields.model_validate({k: v for k, v in value.items() if v is not None})


def _merge_known(base: KnownFields | None, update: KnownFields | None) -> KnownFields | None:
    merged = {
        **(base.model_dump(exclude_none=True) if base else {}),
        **(update.model_dump(exclude_none=True) if update else {}),
    }
    return KnownFields(**merged) if merged else None


def _fits_known_field(field: str, value: Any) -> bool:
    expected = _KNOWN_FIELD_TYPES[field]
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)
