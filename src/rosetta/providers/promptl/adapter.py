"""Promptl adapter.

Promptl is bidirectional but has no separate system parameter: system
instructions travel as in-band ``system`` messages.  Output uses the compact
metadata key style (``_providerMetadata``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import TypeAdapter

from rosetta.config import Direction
from rosetta.core.metadata import (
    MetadataEnvelope,
    MetadataMode,
    combine_envelopes,
    drop_known_fields,
    get_known_fields,
    restore_parts_metadata,
    split_parts_metadata,
)
from rosetta.core.models import (
    BlobPart,
    CanonicalMessage,
    CanonicalPart,
    FilePart,
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
from rosetta.providers.promptl.models import (
    MESSAGE_LIST,
    AssistantMessage,
    FileContent,
    ImageContent,
    PromptlContent,
    PromptlMessage,
    ReasoningContent,
    RedactedReasoningContent,
    TextContent,
    ToolCall,
    ToolCallContent,
    ToolMessage,
    ToolResultContent,
    UserMessage,
)
from rosetta.utils.fields import binary_to_base64, infer_modality, is_url_string

logger = logging.getLogger(__name__)

REDACTED_REASONING = "redacted-reasoning"
_ROLES = ("system", "developer", "user", "assistant")


class PromptlAdapter:
    """Converts between canonical messages and Promptl messages."""

    provider = "promptl"
    name = "Promptl"
    message_schema: TypeAdapter[list[PromptlMessage]] = MESSAGE_LIST
    system_schema: TypeAdapter[Any] | None = None

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            messages = [{"role": shorthand_role(direction), "content": [{"type": "text", "text": messages}]}]
        # the promptl library emits plain string content
        normalized = [_normalize_content(message) for message in messages]
        parsed = MESSAGE_LIST.validate_python(normalized)
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
            converted.extend(_message_from_canonical(message, tool_names, metadata_mode))
        return FromCanonicalResult(messages=converted)


# ---------------------------------------------------------------------------
# Promptl -> canonical
# ---------------------------------------------------------------------------


def _normalize_content(message: Any) -> Any:
    if isinstance(message, dict) and isinstance(message.get("content"), str):
        return {**message, "content": [{"type": "text", "text": message["content"]}]}
    return message


def _message_to_canonical(message: PromptlMessage) -> CanonicalMessage:
    envelope = vendor_envelope(message)
    parts: list[CanonicalPart] = []

    if isinstance(message, ToolMessage):
        has_results = any(isinstance(content, ToolResultContent) for content in message.content)
        if message.tool_name and message.tool_id and not has_results:
            return CanonicalMessage(role="tool", parts=[_legacy_tool_response(message, envelope)])
        parts = [_content_to_canonical(content) for content in message.content]
    elif isinstance(message.content, str):
        parts = [TextPart(content=message.content)]
    else:
        parts = [_content_to_canonical(content) for content in message.content]

    if isinstance(message, AssistantMessage) and message.tool_calls:
        seen = {part.id for part in parts if isinstance(part, ToolCallPart)}
        parts.extend(_tool_call_to_canonical(call) for call in message.tool_calls if call.id not in seen)

    envelope, parts = restore_parts_metadata(envelope, parts)
    data: dict[str, Any] = {"role": message.role, "parts": parts, "provider_metadata": envelope}
    if isinstance(message, UserMessage) and message.name:
        data["name"] = message.name
    return CanonicalMessage.model_validate(data)


def _legacy_tool_response(message: ToolMessage, envelope: MetadataEnvelope | None) -> ToolCallResponsePart:
    wrapped = [_content_to_canonical(content) for content in message.content]
    response: Any
    if len(wrapped) == 1 and isinstance(wrapped[0], TextPart):
        response = wrapped[0].content
    else:
        response = [part.to_wire() for part in wrapped]
    return ToolCallResponsePart(
        id=message.tool_id,
        response=response,
        provider_metadata=combine_envelopes(envelope, _known(tool_name=message.tool_name)),
    )


def _content_to_canonical(content: PromptlContent) -> CanonicalPart:
    if isinstance(content, TextContent):
        return text_or_generic(content.text or "", vendor_envelope(content))

    if isinstance(content, (ImageContent, FileContent)):
        return _media_to_canonical(content)

    if isinstance(content, ReasoningContent):
        return ReasoningPart(content=content.text, provider_metadata=vendor_envelope(content))

    if isinstance(content, RedactedReasoningContent):
        return ReasoningPart(
            content=content.data,
            provider_metadata=vendor_envelope(content, {"original_type": REDACTED_REASONING}),
        )

    if isinstance(content, ToolCallContent):
        return ToolCallPart(
            id=content.tool_call_id,
            name=content.tool_name,
            arguments=content.arguments,
            provider_metadata=vendor_envelope(content),
        )

    known: dict[str, Any] = {"tool_name": content.tool_name}
    if content.is_error:
        known["is_error"] = True
    return ToolCallResponsePart(
        id=content.tool_call_id,
        response=content.result,
        provider_metadata=vendor_envelope(content, known),
    )


def _media_to_canonical(content: ImageContent | FileContent) -> CanonicalPart:
    envelope = vendor_envelope(content)
    if isinstance(content, ImageContent):
        value, modality, mime_type = content.image, "image", None
    else:
        value, modality, mime_type = content.file, infer_modality(content.mime_type), content.mime_type

    if isinstance(value, bytes):
        return BlobPart(
            modality=modality, mime_type=mime_type, content=binary_to_base64(value), provider_metadata=envelope
        )
    if is_url_string(value):
        return UriPart(modality=modality, mime_type=mime_type, uri=value, provider_metadata=envelope)
    return BlobPart(modality=modality, mime_type=mime_type, content=value, provider_metadata=envelope)


def _tool_call_to_canonical(call: ToolCall) -> ToolCallPart:
    return ToolCallPart(
        id=call.id,
        name=call.name,
        arguments=call.arguments,
        provider_metadata=vendor_envelope(call),
    )


def _known(**fields: Any) -> MetadataEnvelope | None:
    return vendor_envelope(None, fields)


# ---------------------------------------------------------------------------
# Canonical -> Promptl
# ---------------------------------------------------------------------------


def _message_from_canonical(
    message: CanonicalMessage,
    tool_names: dict[str, str],
    mode: MetadataMode,
) -> list[dict[str, Any]]:
    message_envelope, parts_envelope = split_parts_metadata(message.provider_metadata)

    if message.role == "tool":
        responses = [part for part in message.parts if isinstance(part, ToolCallResponsePart)]
        skipped = len(message.parts) - len(responses)
        if skipped:
            logger.debug("Dropping %s non tool-result part(s) from promptl tool message", skipped)
        return [
            _tool_message(part, tool_names, mode, message_envelope, parts_envelope if i == 0 else None)
            for i, part in enumerate(responses)
        ]

    responses = [part for part in message.parts if isinstance(part, ToolCallResponsePart)]
    others = [part for part in message.parts if not isinstance(part, ToolCallResponsePart)]

    if message.role == "assistant" and responses:
        contents = _contents(others, tool_names)
        result: list[dict[str, Any]] = []
        if contents:
            result.append(_render_message({"role": "assistant"}, contents, parts_envelope, message_envelope, mode))
            parts_envelope = None
        result.extend(
            _tool_message(part, tool_names, mode, None, parts_envelope if i == 0 else None)
            for i, part in enumerate(responses)
        )
        return result

    role = message.role if message.role in _ROLES else "user"
    base: dict[str, Any] = {"role": role}
    if role == "user" and message.name:
        base["name"] = message.name
    contents = _contents(message.parts, tool_names)
    return [_render_message(base, contents, parts_envelope, message_envelope, mode)]


def _render_message(
    base: dict[str, Any],
    contents: list[tuple[dict[str, Any], MetadataEnvelope | None]],
    parts_envelope: MetadataEnvelope | None,
    message_envelope: MetadataEnvelope | None,
    mode: MetadataMode,
) -> dict[str, Any]:
    rendered = _render_contents(contents, parts_envelope, mode)
    return render({**base, "content": rendered}, message_envelope, mode, use_alt_key_style=True)


def _render_contents(
    contents: list[tuple[dict[str, Any], MetadataEnvelope | None]],
    parts_envelope: MetadataEnvelope | None,
    mode: MetadataMode,
) -> list[dict[str, Any]]:
    rendered: list[dict[str, Any]] = []
    for index, (content, envelope) in enumerate(contents):
        if index == 0:
            envelope = combine_envelopes(parts_envelope, envelope)
        rendered.append(render(content, envelope, mode, use_alt_key_style=True))
    return rendered


def _contents(
    parts: Iterable[CanonicalPart],
    tool_names: dict[str, str],
) -> list[tuple[dict[str, Any], MetadataEnvelope | None]]:
    contents = []
    for part in parts:
        converted = _part_from_canonical(part, tool_names)
        if converted is not None:
            contents.append(converted)
    return contents


def _part_from_canonical(
    part: CanonicalPart,
    tool_names: dict[str, str],
) -> tuple[dict[str, Any], MetadataEnvelope | None] | None:
    envelope = part.provider_metadata
    known = get_known_fields(envelope)

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
            return {"type": "image", "image": value}, envelope
        mime_type = part.mime_type or f"application/{part.modality}"
        return {"type": "file", "file": value, "mimeType": mime_type}, envelope

    if isinstance(part, ReasoningPart):
        if known.original_type == REDACTED_REASONING:
            return {"type": REDACTED_REASONING, "data": part.content}, drop_known_fields(envelope, "original_type")
        return {"type": "reasoning", "text": part.content}, envelope

    if isinstance(part, ToolCallPart):
        arguments = part.arguments if isinstance(part.arguments, dict) else {}
        if part.arguments is not None and not isinstance(part.arguments, dict):
            logger.debug("Tool call %s has non-object arguments; promptl requires an object", part.id)
        content = {
            "type": "tool-call",
            "toolCallId": part.id or "",
            "toolName": part.name,
            "args": arguments,
            "toolArguments": arguments,
        }
        return content, envelope

    if isinstance(part, ToolCallResponsePart):
        return _tool_result(part, tool_names), _without_tool_fields(envelope)

    as_text = generic_as_text(part)
    if as_text is not None:
        text, text_envelope = as_text
        return {"type": "text", "text": text}, text_envelope
    logger.debug("Dropping generic part of type %s with no text content", part.type)
    return None


def _tool_result(part: ToolCallResponsePart, tool_names: dict[str, str]) -> dict[str, Any]:
    known = get_known_fields(part.provider_metadata)
    tool_id = part.id or ""
    tool_name = known.tool_name or tool_names.get(tool_id) or "unknown"
    return {
        "type": "tool-result",
        "toolCallId": tool_id,
        "toolName": tool_name,
        "result": part.response,
        "isError": bool(known.is_error),
    }


def _without_tool_fields(envelope: MetadataEnvelope | None) -> MetadataEnvelope | None:
    return drop_known_fields(envelope, "tool_name", "is_error")


def _tool_message(
    part: ToolCallResponsePart,
    tool_names: dict[str, str],
    mode: MetadataMode,
    message_envelope: MetadataEnvelope | None,
    parts_envelope: MetadataEnvelope | None,
) -> dict[str, Any]:
    result = _tool_result(part, tool_names)
    content = _render_contents([(result, _without_tool_fields(part.provider_metadata))], parts_envelope, mode)
    # toolName/toolId at message level keep older promptl readers working
    base = {"role": "tool", "toolName": result["toolName"], "toolId": result["toolCallId"], "content": content}
    return render(base, message_envelope, mode, use_alt_key_style=True)

