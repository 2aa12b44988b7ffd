"""Anthropic Messages adapter (read-only).

The separate ``system`` parameter becomes a leading system message.
Response metadata (``id``, ``model``, ``usage`` ...) is kept in the message
envelope and ``stop_reason`` is mapped onto the canonical finish reason.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from rosetta.config import Direction
from rosetta.core.models import (
    BlobPart,
    CanonicalMessage,
    CanonicalPart,
    GenericPart,
    ReasoningPart,
    TextPart,
    ToolCallPart,
    ToolCallResponsePart,
    UriPart,
)
from rosetta.providers.anthropic import models as anthropic
from rosetta.providers.base import ToCanonicalResult, shorthand_role, vendor_envelope

STOP_REASONS: dict[str, str] = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_call",
    "refusal": "content_filter",
}

_RESPONSE_FIELDS = frozenset({"id", "type", "model", "stop_sequence", "usage"})


class AnthropicAdapter:
    """Reads Anthropic Messages API messages and system instructions."""

    provider = "anthropic"
    name = "Anthropic"
    message_schema: TypeAdapter[list[anthropic.AnthropicMessage]] = anthropic.MESSAGE_LIST
    system_schema: TypeAdapter[Any] | None = anthropic.SYSTEM

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            messages = [{"role": shorthand_role(direction), "content": messages}]
        parsed = anthropic.MESSAGE_LIST.validate_python(messages)

        converted: list[CanonicalMessage] = []
        if system is not None:
            converted.append(_system_to_canonical(anthropic.SYSTEM.validate_python(system)))
        converted.extend(_message_to_canonical(message) for message in parsed)
        return ToCanonicalResult(messages=converted)


def map_stop_reason(stop_reason: str) -> str:
    """Canonical finish reason for an Anthropic ``stop_reason``; unknown values pass through."""
    return STOP_REASONS.get(stop_reason, stop_reason)


def _system_to_canonical(system: str | list[anthropic.TextBlock]) -> CanonicalMessage:
    if isinstance(system, str):
        return CanonicalMessage(role="system", parts=[TextPart(content=system)])
    parts = [TextPart(content=block.text, provider_metadata=vendor_envelope(block)) for block in system]
    return CanonicalMessage(role="system", parts=parts)


def _message_to_canonical(message: anthropic.AnthropicMessage) -> CanonicalMessage:
    parts: list[CanonicalPart] = []
    if isinstance(message.content, str):
        parts.append(TextPart(content=message.content))
    else:
        for block in message.content:
            parts.extend(_block_to_canonical(block))

    response_fields = message.model_dump(include=set(_RESPONSE_FIELDS), exclude_none=True)
    data: dict[str, Any] = {
        "role": message.role,
        "parts": parts,
        "provider_metadata": vendor_envelope({**response_fields, **(message.model_extra or {})}),
    }
    if message.stop_reason:
        data["finish_reason"] = map_stop_reason(message.stop_reason)
    return CanonicalMessage.model_validate(data)


def _block_to_canonical(block: Any) -> list[CanonicalPart]:
    envelope = vendor_envelope(block)

    if isinstance(block, anthropic.TextBlock):
        return [TextPart(content=block.text, provider_metadata=envelope)]

    if isinstance(block, anthropic.ThinkingBlock):
        envelope = vendor_envelope({"signature": block.signature, **(block.model_extra or {})})
        return [ReasoningPart(content=block.thinking, provider_metadata=envelope)]

    if isinstance(block, anthropic.RedactedThinkingBlock):
        return [
            ReasoningPart(
                content=block.data,
                provider_metadata=vendor_envelope(block, {"original_type": "redacted_thinking"}),
            )
        ]

    if isinstance(block, anthropic.ToolUseBlock):
        return [ToolCallPart(id=block.id, name=block.name, arguments=block.input, provider_metadata=envelope)]

    if isinstance(block, anthropic.ServerToolUseBlock):
        envelope = vendor_envelope({"is_server_tool": True, **(block.model_extra or {})})
        return [ToolCallPart(id=block.id, name=block.name, arguments=block.input, provider_metadata=envelope)]

    if isinstance(block, anthropic.ToolResultBlock):
        known = {"is_error": True} if block.is_error else None
        return [
            ToolCallResponsePart(
                id=block.tool_use_id,
                response=tool_result_response(block.content),
                provider_metadata=vendor_envelope(block, known),
            )
        ]

    if isinstance(block, anthropic.ImageBlock):
        return [_source_to_canonical(block.source, "image", block.model_extra or {})]

    if isinstance(block, anthropic.DocumentBlock):
        return _document_to_canonical(block)

    if isinstance(block, anthropic.WebSearchToolResultBlock):
        envelope = vendor_envelope({"is_web_search_result": True, **(block.model_extra or {})})
        return [ToolCallResponsePart(id=block.tool_use_id, response=block.content, provider_metadata=envelope)]

    return [
        GenericPart.model_validate(
            {
                "type": "search_result",
                "source": block.source,
                "title": block.title,
                "content": "\n".join(text.text for text in block.content),
                "provider_metadata": envelope,
            }
        )
    ]


def tool_result_response(content: str | list[Any] | None) -> Any:
    """Response value of a ``tool_result`` block.

    Text blocks are reduced to their text; a lone text block collapses to a
    plain string.
    """
    if content is None or isinstance(content, str):
        return content
    items = [
        item["text"] if isinstance(item, dict) and item.get("type") == "text" and item.get("text") else item
        for item in content
    ]
    if len(items) == 1 and isinstance(items[0], str):
        return items[0]
    return items


def _source_to_canonical(source: Any, modality: str, block_extras: dict[str, Any]) -> CanonicalPart:
    envelope = vendor_envelope({**block_extras, **(source.model_extra or {})})
    if isinstance(source, anthropic.UrlSource):
        return UriPart(modality=modality, uri=source.url, provider_metadata=envelope)
    return BlobPart(modality=modality, mime_type=source.media_type, content=source.data, provider_metadata=envelope)


def _document_to_canonical(block: anthropic.DocumentBlock) -> list[CanonicalPart]:
    source = block.source
    if not isinstance(source, anthropic.ContentSource):
        return [_source_to_canonical(source, "document", block.model_extra or {})]
    if isinstance(source.content, str):
        return [TextPart(content=source.content, provider_metadata=vendor_envelope(block))]
    parts: list[CanonicalPart] = []
    for nested in source.content:
        parts.extend(_block_to_canonical(nested))
    return parts
