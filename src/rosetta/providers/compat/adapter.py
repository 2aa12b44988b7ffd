"""Best-effort adapter for message formats no other adapter recognizes.

The compat adapter is the inference fallback.  It accepts any list of
objects and sniffs each one for the fields common LLM formats use:

1. keys are normalized from snake_case and kebab-case to camelCase;
2. vendor roles are mapped (``model`` to ``assistant``, ``function`` to ``tool``);
3. content is looked up in ``content``, then ``parts``, then ``text`` and
   ``message``;
4. parts are identified by their ``type`` discriminator, or by
   characteristic fields (Gemini style) when they have none;
5. messages with nothing recognizable are serialized to a JSON text part.

Covers OpenAI, Anthropic, Gemini, Vercel AI and Promptl shapes as well as
role/content formats such as Ollama, Cohere or Mistral.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter

from rosetta.config import Direction
from rosetta.core.metadata import read_envelope
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
from rosetta.providers.base import ToCanonicalResult, shorthand_role, strip_envelope_keys, vendor_envelope
from rosetta.providers.compat import models as compat
from rosetta.utils.fields import infer_modality, is_url_string, normalize_keys, parse_data_url, parse_json_if_string

logger = logging.getLogger(__name__)

ROLE_ALIASES: dict[str, str] = {"model": "assistant", "function": "tool"}

# Message keys consumed by the conversion; anything else is worth serializing.
HANDLED_MESSAGE_KEYS = frozenset(
    {
        "role",
        "name",
        "content",
        "parts",
        "text",
        "message",
        "toolCalls",
        "functionCall",
        "thinking",
        "reasoning",
        "reasoningContent",
        "refusal",
    }
)

Obj = Mapping[str, Any]


class CompatAdapter:
    """Reads arbitrary role/content style messages."""

    provider = "compat"
    name = "Compat"
    message_schema: TypeAdapter[list[compat.CompatMessage]] = compat.MESSAGE_LIST
    system_schema: TypeAdapter[Any] | None = compat.SYSTEM

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            message = CanonicalMessage(role=shorthand_role(direction), parts=[TextPart(content=messages)])
            return ToCanonicalResult(messages=[message])
        parsed = compat.MESSAGE_LIST.validate_python(messages)

        converted = [_message_to_canonical(message, direction) for message in parsed]
        if system is not None:
            system_parts = _system_to_parts(compat.SYSTEM.validate_python(system))
            if system_parts:
                converted.insert(0, CanonicalMessage(role="system", parts=system_parts))
        return ToCanonicalResult(messages=converted)


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------


def _first(obj: Obj, *keys: str) -> Any:
    for key in keys:
        value = obj.get(key)
        if value is not None:
            return value
    return None


def _string(obj: Obj | None, *keys: str) -> str | None:
    if obj is None:
        return None
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return None


def _object(obj: Obj | None, key: str) -> Obj | None:
    value = obj.get(key) if obj is not None else None
    return value if isinstance(value, Mapping) else None


def _known(**fields: Any) -> Any:
    return vendor_envelope(None, fields)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


def detect_role(message: Obj, direction: Direction) -> str:
    """Canonical role of a normalized message, falling back to *direction*."""
    role = message.get("role")
    if isinstance(role, str):
        normalized = role.lower()
        return ROLE_ALIASES.get(normalized, normalized)
    return shorthand_role(direction)


def _system_to_parts(system: str | dict[str, Any] | list[dict[str, Any]]) -> list[CanonicalPart]:
    if isinstance(system, str):
        return [TextPart(content=system)]
    if isinstance(system, list):
        parts: list[CanonicalPart] = []
        for item in system:
            parts.extend(_part_to_canonical(item))
        return parts
    text = _string(system, "text") or _string(system, "content")
    if text:
        return [TextPart(content=text)]
    return [TextPart(content=_to_json(system))]


def _message_to_canonical(message: Obj, direction: Direction) -> CanonicalMessage:
    envelope = read_envelope(message)
    normalized = normalize_keys(strip_envelope_keys(message))
    role = detect_role(normalized, direction)
    name = _string(normalized, "name")
    parts: list[CanonicalPart] = []

    # Message-level reasoning (Ollama, Fireworks, Together AI)
    for key in ("thinking", "reasoningContent", "reasoning"):
        reasoning = _string(normalized, key)
        if reasoning:
            parts.append(ReasoningPart(content=reasoning))

    refusal = _string(normalized, "refusal")
    if refusal:
        parts.append(TextPart(content=refusal, provider_metadata=_known(is_refusal=True)))

    if normalized.get("content") is not None:
        parts.extend(_content_to_parts(normalized["content"]))
    elif isinstance(normalized.get("parts"), list):
        for item in normalized["parts"]:
            if isinstance(item, Mapping):
                parts.extend(_part_to_canonical(item))
    else:
        text = _string(normalized, "text") or _string(normalized, "message")
        if text:
            parts.append(TextPart(content=text))

    tool_calls = normalized.get("toolCalls")
    if isinstance(tool_calls, list):
        for call in tool_calls:
            if isinstance(call, Mapping):
                parts.extend(_tool_call_to_parts(call))

    function_call = _object(normalized, "functionCall")
    if function_call is not None:
        parts.extend(_legacy_function_call(function_call))

    if role == "tool" and parts and not any(isinstance(part, ToolCallResponsePart) for part in parts):
        return _wrap_tool_response(normalized, parts, name, envelope)

    if not parts and any(key not in HANDLED_MESSAGE_KEYS for key in normalized):
        parts.append(TextPart(content=_to_json(strip_envelope_keys(message))))

    data: dict[str, Any] = {"role": role, "parts": parts, "provider_metadata": envelope}
    if name:
        data["name"] = name
    return CanonicalMessage.model_validate(data)


def _wrap_tool_response(
    message: Obj,
    parts: list[CanonicalPart],
    name: str | None,
    envelope: Any,
) -> CanonicalMessage:
    tool_call_id = _first(message, "toolCallId", "toolUseId")
    tool_name = _first(message, "name", "toolName")

    response: Any
    if len(parts) == 1 and isinstance(parts[0], TextPart):
        response = parts[0].content
    else:
        response = [part.content if isinstance(part, TextPart) else part.to_wire() for part in parts]

    part = ToolCallResponsePart(
        id=tool_call_id if isinstance(tool_call_id, str) else None,
        response=response,
        provider_metadata=_known(tool_name=str(tool_name)) if tool_name else None,
    )
    data: dict[str, Any] = {"role": "tool", "parts": [part], "provider_metadata": envelope}
    if name:
        data["name"] = name
    return CanonicalMessage.model_validate(data)


def _content_to_parts(content: Any) -> list[CanonicalPart]:
    if isinstance(content, str):
        return [TextPart(content=content)]
    if isinstance(content, list):
        parts: list[CanonicalPart] = []
        for item in content:
            if isinstance(item, str):
                parts.append(TextPart(content=item))
            elif isinstance(item, Mapping):
                parts.extend(_part_to_canonical(item))
        return parts
    if isinstance(content, Mapping):
        return _part_to_canonical(content)
    return [TextPart(content=_to_text(content))]


# ---------------------------------------------------------------------------
# Parts
# ---------------------------------------------------------------------------


def _part_to_canonical(part: Obj) -> list[CanonicalPart]:
    envelope = read_envelope(part)
    normalized = normalize_keys(strip_envelope_keys(part))
    part_type = _string(normalized, "type")
    if part_type:
        converted = _typed_part(normalized, part_type.lower())
    else:
        converted = _untyped_part(normalized)
    if envelope is None or not converted:
        return converted
    first = converted[0]
    converted[0] = first.model_copy(update={"provider_metadata": envelope})
    return converted


def _typed_part(part: Obj, part_type: str) -> list[CanonicalPart]:
    if part_type == "text":
        text = _string(part, "text", "content")
        return [TextPart(content=text)] if text else []

    if part_type in ("image_url", "imageurl"):
        image_url = _object(part, "imageUrl")
        url = _string(image_url, "url", "uri")
        return [_image_from_url(url)] if url else []

    if part_type == "image":
        source = _object(part, "source")
        if source is not None:
            return [_image_source(source)]
        image = _string(part, "image")
        return [_image_from_url(image)] if image else []

    if part_type in ("input_audio", "inputaudio", "audio"):
        audio = _object(part, "inputAudio") or _object(part, "audio")
        data = _string(audio, "data") or _string(part, "data")
        audio_format = _string(audio, "format") or _string(part, "format")
        if not data:
            return []
        mime_type = {"wav": "audio/wav", "mp3": "audio/mp3"}.get(audio_format or "", "audio/mpeg")
        return [BlobPart(modality="audio", mime_type=mime_type, content=data)]

    if part_type in ("file", "document"):
        return _file_part(part)

    if part_type in ("tool_use", "tooluse", "tool-call", "toolcall"):
        name = _string(part, "name", "toolName")
        if not name:
            return []
        arguments = _first(part, "input", "args", "arguments", "toolArguments")
        return [
            ToolCallPart(
                id=_string(part, "id", "toolCallId"),
                name=name,
                arguments=parse_json_if_string(arguments),
            )
        ]

    if part_type in ("tool_result", "toolresult", "tool-result"):
        return [
            ToolCallResponsePart(
                id=_string(part, "toolUseId", "toolCallId"),
                response=_first(part, "content", "output", "result"),
            )
        ]

    if part_type in ("thinking", "reasoning"):
        text = _string(part, "thinking", "text", "content")
        return [ReasoningPart(content=text)] if text else []

    if part_type in ("redacted_thinking", "redactedthinking", "redacted-reasoning"):
        data = _string(part, "data", "content")
        if not data:
            return []
        return [ReasoningPart(content=data, provider_metadata=_known(original_type=part_type))]

    if part_type == "refusal":
        text = _string(part, "refusal", "content")
        return [TextPart(content=text, provider_metadata=_known(is_refusal=True))] if text else []

    text = _string(part, "text", "content")
    if text:
        return [GenericPart(type=part_type, content=text)]
    return [GenericPart.model_validate(dict(part))]


def _untyped_part(part: Obj) -> list[CanonicalPart]:
    text = _string(part, "text")
    if text:
        if part.get("thought") is True:
            return [ReasoningPart(content=text)]
        return [TextPart(content=text)]

    inline_data = _object(part, "inlineData")
    data = _string(inline_data, "data")
    if data:
        mime_type = _string(inline_data, "mimeType")
        return [BlobPart(modality=infer_modality(mime_type), mime_type=mime_type, content=data)]

    file_data = _object(part, "fileData")
    uri = _string(file_data, "fileUri", "uri")
    if uri:
        mime_type = _string(file_data, "mimeType")
        return [UriPart(modality=infer_modality(mime_type), mime_type=mime_type, uri=uri)]

    function_call = _object(part, "functionCall")
    name = _string(function_call, "name")
    if function_call is not None and name:
        return [
            ToolCallPart(
                id=_string(function_call, "id"),
                name=name,
                arguments=parse_json_if_string(_first(function_call, "args", "arguments")),
            )
        ]

    function_response = _object(part, "functionResponse")
    if function_response is not None:
        tool_name = _string(function_response, "name")
        return [
            ToolCallResponsePart(
                id=_string(function_response, "id"),
                response=function_response.get("response"),
                provider_metadata=_known(tool_name=tool_name) if tool_name else None,
            )
        ]

    if part.get("executableCode"):
        return [GenericPart.model_validate({**part, "type": "executable_code"})]
    if part.get("codeExecutionResult"):
        return [GenericPart.model_validate({**part, "type": "code_execution_result"})]

    content = _string(part, "content")
    if content:
        return [TextPart(content=content)]

    logger.debug("Keeping unrecognized part with keys %s as a generic part", sorted(part))
    return [GenericPart.model_validate({**part, "type": "unknown"})]


def _file_part(part: Obj) -> list[CanonicalPart]:
    file = _object(part, "file")
    if file is not None:
        mime_type = _string(part, "mediaType", "mimeType") or _string(file, "mimeType")
        modality = infer_modality(mime_type)
        file_id = _string(file, "fileId", "file_id")
        if file_id:
            return [FilePart(modality=modality, mime_type=mime_type, file_id=file_id)]
        file_data = _string(file, "fileData", "file_data")
        if file_data:
            return [BlobPart(modality=modality, mime_type=mime_type, content=file_data)]

    source = _object(part, "source")
    if source is not None:
        return [_document_source(source)]

    data = _string(part, "data")
    media_type = _string(part, "mediaType", "mimeType")
    if data and media_type:
        modality = infer_modality(media_type)
        if is_url_string(data):
            return [UriPart(modality=modality, mime_type=media_type, uri=data)]
        return [BlobPart(modality=modality, mime_type=media_type, content=data)]
    return []


def _tool_call_to_parts(call: Obj) -> list[CanonicalPart]:
    normalized = normalize_keys(call)
    call_id = _string(normalized, "id")
    call_type = _string(normalized, "type")

    if call_type in ("function", "custom"):
        body = _object(normalized, call_type)
        name = _string(body, "name")
        if body is not None and name:
            arguments = body.get("arguments") if call_type == "function" else body.get("input")
            return [ToolCallPart(id=call_id, name=name, arguments=parse_json_if_string(arguments))]

    name = _string(normalized, "name", "toolName")
    if not name:
        return []
    arguments = _first(normalized, "arguments", "args", "input")
    return [ToolCallPart(id=call_id, name=name, arguments=parse_json_if_string(arguments))]


def _legacy_function_call(function_call: Obj) -> list[CanonicalPart]:
    normalized = normalize_keys(function_call)
    name = _string(normalized, "name")
    if not name:
        return []
    return [ToolCallPart(id=None, name=name, arguments=parse_json_if_string(normalized.get("arguments")))]


def _image_from_url(url: str) -> CanonicalPart:
    data_url = parse_data_url(url)
    if data_url is not None:
        mime_type, payload = data_url
        return BlobPart(modality="image", mime_type=mime_type or "image/png", content=payload)
    return UriPart(modality="image", uri=url)


def _image_source(source: Obj) -> CanonicalPart:
    normalized = normalize_keys(source)
    source_type = _string(normalized, "type")
    if source_type == "base64":
        data = _string(normalized, "data")
        if data:
            mime_type = _string(normalized, "mediaType", "mimeType")
            return BlobPart(modality="image", mime_type=mime_type, content=data)
    if source_type == "url":
        url = _string(normalized, "url", "uri")
        if url:
            return UriPart(modality="image", uri=url)
    return BlobPart(modality="image", content="")


def _document_source(source: Obj) -> CanonicalPart:
    normalized = normalize_keys(source)
    source_type = _string(normalized, "type")
    mime_type = _string(normalized, "mediaType", "mimeType")
    modality = infer_modality(mime_type)
    if source_type == "base64":
        data = _string(normalized, "data")
        if data:
            return BlobPart(modality=modality, mime_type=mime_type, content=data)
    if source_type == "url":
        url = _string(normalized, "url", "uri")
        if url:
            return UriPart(modality=modality, mime_type=mime_type, uri=url)
    return BlobPart(modality=modality, content="")


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
