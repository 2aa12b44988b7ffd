"""Vercel AI SDK adapter.

System messages only carry a string, so their parts are joined and any
part-level metadata is promoted to the message.  Tool results wrap their
payload in a typed ``output`` object.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import TypeAdapter

from rosetta.config import Direction
from rosetta.core.metadata import (
    MetadataEnvelope,
    MetadataMode,
    combine_envelopes,
    drop_known_fields,
    gather_parts_metadata,
    get_known_fields,
    promote_parts_metadata,
    restore_parts_metadata,
    split_parts_metadata,
)
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
from rosetta.providers.base import (
    FromCanonicalResult,
    ToCanonicalResult,
    generic_as_text,
    render,
    shorthand_role,
    text_or_generic,
    tool_call_names,
    vendor_envelope,
)
from rosetta.providers.vercel_ai import models as vercel
from rosetta.utils.fields import binary_to_base64, infer_modality, is_url_string

logger = logging.getLogger(__name__)

APPROVAL_REQUEST = "tool-approval-request"
APPROVAL_RESPONSE = "tool-approval-response"

_USER_TYPES = frozenset({"text", "image", "file"})
_TOOL_TYPES = frozenset({"tool-result", APPROVAL_RESPONSE})

Content = tuple[dict[str, Any], MetadataEnvelope | None]


class VercelAIAdapter:
    """Converts between canonical messages and Vercel AI SDK model messages."""

    provider = "vercel_ai"
    name = "Vercel AI"
    message_schema: TypeAdapter[list[vercel.VercelMessage]] = vercel.MESSAGE_LIST
    system_schema: TypeAdapter[Any] | None = None

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            messages = [{"role": shorthand_role(direction), "content": messages}]
        parsed = vercel.MESSAGE_LIST.validate_python(messages)
        return ToCanonicalResult(messages=[_message_to_canonical(message) for message in parsed])

    def from_canonical(
        self,
        messages: list[CanonicalMessage],
        direction: Direction = "input",
        metadata_mode: MetadataMode = "preserve",
    ) -> FromCanonicalResult:
        tool_names = tool_call_names(messages)
        converted: list[dict[str, Any]] = []
        for message in messages:
            rendered = _message_from_canonical(message, tool_names, metadata_mode)
            if rendered is not None:
                converted.append(rendered)
        return FromCanonicalResult(messages=converted)


# ---------------------------------------------------------------------------
# Vercel -> canonical
# ---------------------------------------------------------------------------


def _message_to_canonical(message: vercel.VercelMessage) -> CanonicalMessage:
    parts: list[CanonicalPart]
    if isinstance(message.content, str):
        parts = [TextPart(content=message.content)]
    else:
        parts = [_part_to_canonical(part) for part in message.content]

    envelope, parts = restore_parts_metadata(vendor_envelope(message), parts)
    return CanonicalMessage(role=message.role, parts=parts, provider_metadata=envelope)


def _part_to_canonical(part: Any) -> CanonicalPart:
    envelope = vendor_envelope(part)

    if isinstance(part, vercel.TextPart):
        return text_or_generic(part.text, envelope)

    if isinstance(part, vercel.ImagePart):
        return _data_to_canonical(part.image, "image", part.media_type, envelope)

    if isinstance(part, vercel.FilePart):
        return _data_to_canonical(part.data, infer_modality(part.media_type), part.media_type, envelope)

    if isinstance(part, vercel.ReasoningPart):
        return ReasoningPart(content=part.text, provider_metadata=envelope)

    if isinstance(part, vercel.ToolCallPart):
        return ToolCallPart(id=part.tool_call_id, name=part.tool_name, arguments=part.input, provider_metadata=envelope)

    if isinstance(part, vercel.ToolResultPart):
        known: dict[str, Any] = {"tool_name": part.tool_name}
        if part.output.type in vercel.ERROR_OUTPUT_TYPES:
            known["is_error"] = True
        return ToolCallResponsePart(
            id=part.tool_call_id,
            response=part.output.model_dump(by_alias=True, exclude_unset=True),
            provider_metadata=vendor_envelope(part, known),
        )

    if isinstance(part, vercel.ToolApprovalRequest):
        payload = {"approvalId": part.approval_id, "toolCallId": part.tool_call_id}
    else:
        payload = {"approvalId": part.approval_id, "approved": part.approved}
        if part.reason is not None:
            payload["reason"] = part.reason
    return GenericPart.model_validate({"type": part.type, **payload, "provider_metadata": envelope})


def _data_to_canonical(
    value: str | bytes,
    modality: str,
    mime_type: str | None,
    envelope: MetadataEnvelope | None,
) -> CanonicalPart:
    if isinstance(value, bytes):
        return BlobPart(
            modality=modality, mime_type=mime_type, content=binary_to_base64(value), provider_metadata=envelope
        )
    if is_url_string(value):
        return UriPart(modality=modality, mime_type=mime_type, uri=value, provider_metadata=envelope)
    return BlobPart(modality=modality, mime_type=mime_type, content=value, provider_metadata=envelope)


# ---------------------------------------------------------------------------
# Canonical -> Vercel
# ---------------------------------------------------------------------------


def _message_from_canonical(
    message: CanonicalMessage,
    tool_names: dict[str, str],
    mode: MetadataMode,
) -> dict[str, Any] | None:
    if message.role == "system":
        texts = [part for part in message.parts if isinstance(part, TextPart)]
        if len(texts) < len(message.parts):
            dropped = len(message.parts) - len(texts)
            logger.debug("Dropping %d non-text system parts not representable in vercel_ai", dropped)
        gathered = gather_parts_metadata(part.provider_metadata for part in texts)
        envelope = promote_parts_metadata(message.provider_metadata, gathered)
        content = "\n".join(part.content for part in texts)
        return render({"role": "system", "content": content}, envelope, mode, use_alt_key_style=True)

    message_envelope, parts_envelope = split_parts_metadata(message.provider_metadata)

    if message.role in ("user", "assistant", "tool"):
        role = message.role
        contents = [converted for part in message.parts if (converted := _part_from_canonical(part, tool_names))]
    else:
        role = "user"
        contents = [
            ({"type": "text", "text": part.content}, None) for part in message.parts if isinstance(part, TextPart)
        ]

    if role == "user":
        contents = [content for content in contents if content[0]["type"] in _USER_TYPES]
    elif role == "tool":
        contents = [content for content in contents if content[0]["type"] in _TOOL_TYPES]

    if not contents and role != "assistant":
        logger.debug("Skipping %s message with no content representable in vercel_ai", message.role)
        return None

    rendered: list[dict[str, Any]] = []
    for index, (content, envelope) in enumerate(contents):
        if index == 0:
            envelope = combine_envelopes(parts_envelope, envelope)
        rendered.append(render(content, envelope, mode, use_alt_key_style=True))

    body: str | list[dict[str, Any]] = rendered
    if role != "tool" and len(rendered) == 1 and _is_bare_text(rendered[0]):
        body = rendered[0]["text"]
    return render({"role": role, "content": body}, message_envelope, mode, use_alt_key_style=True)


def _is_bare_text(content: dict[str, Any]) -> bool:
    return content.get("type") == "text" and set(content) == {"type", "text"}


def _part_from_canonical(part: CanonicalPart, tool_names: dict[str, str]) -> Content | None:
    envelope = part.provider_metadata

    if isinstance(part, TextPart):
        return {"type": "text", "text": part.content}, envelope

    if isinstance(part, (BlobPart, UriPart, FilePart)):
        if isinstance(part, BlobPart):
            value = part.content
        elif isinstance(part, UriPart):
            value = part.uri
        else:
            value = part.file_id
        if part.modality == "image" and not isinstance(part, FilePart):
            image: dict[str, Any] = {"type": "image", "image": value}
            if part.mime_type:
                image["mediaType"] = part.mime_type
            return image, envelope
        mime_type = part.mime_type or f"application/{part.modality}"
        return {"type": "file", "data": value, "mediaType": mime_type}, envelope

    if isinstance(part, ReasoningPart):
        return {"type": "reasoning", "text": part.content}, envelope

    if isinstance(part, ToolCallPart):
        call = {"type": "tool-call", "toolCallId": part.id or "", "toolName": part.name, "input": part.arguments}
        return call, envelope

    if isinstance(part, ToolCallResponsePart):
        known = get_known_fields(envelope)
        tool_id = part.id or ""
        content = {
            "type": "tool-result",
            "toolCallId": tool_id,
            "toolName": known.tool_name or tool_names.get(tool_id) or "unknown",
            "output": wrap_output(part.response, is_error=bool(known.is_error)),
        }
        return content, drop_known_fields(envelope, "tool_name", "is_error")

    if part.type in (APPROVAL_REQUEST, APPROVAL_RESPONSE):
        return {"type": part.type, **part.extra_fields}, envelope

    as_text = generic_as_text(part)
    if as_text is not None:
        text, text_envelope = as_text
        return {"type": "text", "text": text}, text_envelope
    logger.debug("Dropping generic part of type %s with no text content", part.type)
    return None


def wrap_output(response: Any, *, is_error: bool = False) -> dict[str, Any]:
    """Typed tool-result ``output`` object for a canonical tool response."""
    if isinstance(response, dict) and response.get("type") in vercel.OUTPUT_TYPES:
        return response
    if isinstance(response, str):
        return {"type": "error-text" if is_error else "text", "value": response}
    return {"type": "error-json" if is_error else "json", "value": response}
