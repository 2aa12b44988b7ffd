"""GenAI adapter: the canonical format itself.

Reading validates canonical messages and folds unknown fields into the
metadata envelope.  Writing splits ``system`` messages out of the list,
tagging each system part with the position of the message it came from so
that reading the result back restores the original interleaving.  A system
message without parts has nothing to carry that position and is dropped.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import TypeAdapter

from rosetta.config import Direction
from rosetta.core.metadata import (
    ENVELOPE_KEY,
    KnownFields,
    MetadataEnvelope,
    MetadataMode,
    build_envelope,
    drop_known_fields,
    get_known_fields,
    with_envelope,
)
from rosetta.core.models import (
    MESSAGE_LIST,
    PART_LIST,
    CanonicalEntity,
    CanonicalMessage,
    CanonicalPart,
    GenericPart,
)
from rosetta.providers.base import (
    FromCanonicalResult,
    ToCanonicalResult,
    render,
    shorthand_role,
    strip_envelope_keys,
)


class GenAIAdapter:
    """Reads and writes canonical messages."""

    provider = "genai"
    name = "GenAI"
    message_schema: TypeAdapter[list[CanonicalMessage]] = MESSAGE_LIST
    system_schema: TypeAdapter[list[CanonicalPart]] | None = PART_LIST

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            messages = [{"role": shorthand_role(direction), "parts": [{"type": "text", "content": messages}]}]
        parsed = [_fold_message(message) for message in MESSAGE_LIST.validate_python(messages)]

        if system is not None:
            if isinstance(system, str):
                system = [{"type": "text", "content": system}]
            elif not isinstance(system, list):
                system = [system]
            system_parts = [_fold_extras(part) for part in PART_LIST.validate_python(system)]
            parsed = reinsert_system(parsed, system_parts)

        return ToCanonicalResult(messages=parsed)

    def from_canonical(
        self,
        messages: list[CanonicalMessage],
        direction: Direction = "input",
        metadata_mode: MetadataMode = "preserve",
    ) -> FromCanonicalResult:
        system: list[dict[str, Any]] = []
        emitted: list[dict[str, Any]] = []

        for index, message in enumerate(messages):
            if message.role == "system":
                system.extend(_render_system_part(part, index, metadata_mode) for part in message.parts)
            else:
                emitted.append(render_message(message, metadata_mode))

        return FromCanonicalResult(messages=emitted, system=system or None)


# ---------------------------------------------------------------------------
# System repositioning
# ---------------------------------------------------------------------------


def reinsert_system(
    messages: Sequence[CanonicalMessage],
    parts: Sequence[CanonicalPart],
) -> list[CanonicalMessage]:
    """Insert system *parts* into *messages* as ``system`` messages.

    Parts are grouped by their ``message_index`` known field.  Parts without
    an index are inserted first at position 0, then indexed groups in
    ascending order at ``min(index, len(result))``.  Each insertion shifts
    later positions by one, so ascending order reproduces the original
    layout.  The consumed index is removed from the inserted parts.
    """
    result = list(messages)
    if not parts:
        return result

    unindexed: list[CanonicalPart] = []
    indexed: dict[int, list[CanonicalPart]] = {}
    for part in parts:
        index = get_known_fields(part.provider_metadata).message_index
        if index is None:
            unindexed.append(part)
            continue
        stripped = with_envelope(part, drop_known_fields(part.provider_metadata, "message_index"))
        indexed.setdefault(index, []).append(stripped)

    if unindexed:
        result.insert(0, CanonicalMessage(role="system", parts=unindexed))
    for index in sorted(indexed):
        result.insert(min(max(index, 0), len(result)), CanonicalMessage(role="system", parts=indexed[index]))
    return result


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_part(part: CanonicalPart, metadata_mode: MetadataMode) -> dict[str, Any]:
    """Canonical wire form of *part* with *metadata_mode* applied."""
    return render(strip_envelope_keys(part.to_wire()), part.provider_metadata, metadata_mode)


def render_message(message: CanonicalMessage, metadata_mode: MetadataMode) -> dict[str, Any]:
    """Canonical wire form of *message* with *metadata_mode* applied to it and its parts."""
    wire = strip_envelope_keys(message.to_wire())
    wire["parts"] = [render_part(part, metadata_mode) for part in message.parts]
    return render(wire, message.provider_metadata, metadata_mode)


def _render_system_part(part: CanonicalPart, index: int, metadata_mode: MetadataMode) -> dict[str, Any]:
    marker = KnownFields(message_index=index)
    if metadata_mode == "preserve":
        envelope = build_envelope(part.provider_metadata, {}, marker)
        return render(strip_envelope_keys(part.to_wire()), envelope, metadata_mode)
    # the position marker is structural and survives every mode
    rendered = render_part(part, metadata_mode)
    rendered[ENVELOPE_KEY] = MetadataEnvelope(known=marker).to_container()
    return rendered


# ---------------------------------------------------------------------------
# Folding unknown fields
# ---------------------------------------------------------------------------


def _fold_extras(entity: CanonicalPart) -> CanonicalPart:
    if isinstance(entity, GenericPart):
        return entity
    return _rebuild(entity)


def _fold_message(message: CanonicalMessage) -> CanonicalMessage:
    parts = [_fold_extras(part) for part in message.parts]
    return _rebuild(message, parts=parts)


def _rebuild(entity: Any, **updates: Any) -> Any:
    extras = entity.extra_fields
    if not extras and not updates:
        return entity
    model: type[CanonicalEntity] = type(entity)
    data = {
        name: getattr(entity, name)
        for name in model.model_fields
        if name in entity.model_fields_set and name != "provider_metadata"
    }
    data.update(updates)
    envelope = build_envelope(entity.provider_metadata, extras)
    if envelope is not None:
        data["provider_metadata"] = envelope
    return model.model_validate(data)
