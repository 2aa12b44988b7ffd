"""OpenAI Chat Completions adapter (read-only)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, TypeAdapter

from rosetta.config import Direction
from rosetta.core.models import (
    BlobPart,
    CanonicalMessage,
    CanonicalPart,
    FilePart,
    TextPart,
    ToolCallPart,
    ToolCallResponsePart,
    UriPart,
)
from rosetta.providers.base import ToCanonicalResult, shorthand_role, vendor_envelope
from rosetta.providers.openai_completions import models as openai
from rosetta.utils.fields import parse_data_url, parse_json_if_string

_REFUSAL = {"is_refusal": True}


class OpenAICompletionsAdapter:
    """Reads OpenAI Chat Completions messages."""

    provider = "openai_completions"
    name = "OpenAI Completions"
    message_schema: TypeAdapter[list[openai.CompletionsMessage]] = openai.MESSAGE_LIST
    system_schema: TypeAdapter[Any] | None = None

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            messages = [{"role": shorthand_role(direction), "content": messages}]
        parsed = openai.MESSAGE_LIST.validate_python(messages)
        return ToCanonicalResult(messages=[_message_to_canonical(message) for message in parsed])


def _message_to_canonical(message: openai.CompletionsMessage) -> CanonicalMessage:
    if isinstance(message, openai.ToolMessage):
        texts = _text_content(message.content)
        response: Any = texts[0].content if len(texts) == 1 else [part.content for part in texts]
        part = ToolCallResponsePart(
            id=message.tool_call_id, response=response, provider_metadata=vendor_envelope(message)
        )
        return CanonicalMessage(role="tool", parts=[part])

    if isinstance(message, openai.FunctionMessage):
        part = ToolCallResponsePart(
            id=None,
            response=message.content,
            provider_metadata=vendor_envelope(message, {"tool_name": message.name}),
        )
        return CanonicalMessage(role="tool", parts=[part])

    envelope = vendor_envelope(message)
    parts: list[CanonicalPart]
    if isinstance(message, (openai.DeveloperMessage, openai.SystemMessage)):
        parts = list(_text_content(message.content))
    elif isinstance(message, openai.UserMessage):
        if isinstance(message.content, str):
            parts = [TextPart(content=message.content)]
        else:
            parts = [_user_part_to_canonical(part) for part in message.content]
    else:
        parts, envelope = _assistant_parts(message)

    data: dict[str, Any] = {"role": message.role, "parts": parts, "provider_metadata": envelope}
    if message.name:
        data["name"] = message.name
    return CanonicalMessage.model_validate(data)


def _text_content(content: str | list[openai.TextPart]) -> list[TextPart]:
    if isinstance(content, str):
        return [TextPart(content=content)]
    return [TextPart(content=part.text, provider_metadata=vendor_envelope(part)) for part in content]


def _nested_extras(model: BaseModel, *consumed: str) -> dict[str, Any]:
    return model.model_dump(exclude=set(consumed), exclude_unset=True)


def _user_part_to_canonical(part: Any) -> CanonicalPart:
    if isinstance(part, openai.TextPart):
        return TextPart(content=part.text, provider_metadata=vendor_envelope(part))

    if isinstance(part, openai.ImageUrlPart):
        url = part.image_url.url
        extras = {**(part.model_extra or {}), **_nested_extras(part.image_url, "url")}
        envelope = vendor_envelope(extras)
        data_url = parse_data_url(url)
        if data_url is not None:
            mime_type, payload = data_url
            return BlobPart(
                modality="image", mime_type=mime_type or "image/png", content=payload, provider_metadata=envelope
            )
        return UriPart(modality="image", uri=url, provider_metadata=envelope)

    if isinstance(part, openai.InputAudioPart):
        audio = part.input_audio
        extras = {"format": audio.format, **(part.model_extra or {}), **_nested_extras(audio, "data", "format")}
        return BlobPart(
            modality="audio",
            mime_type="audio/wav" if audio.format == "wav" else "audio/mp3",
            content=audio.data,
            provider_metadata=vendor_envelope(extras),
        )

    file = part.file
    extras = {**(part.model_extra or {}), **_nested_extras(file, "file_id", "file_data")}
    envelope = vendor_envelope(extras)
    if file.file_data and not file.file_id:
        return BlobPart(modality="document", content=file.file_data, provider_metadata=envelope)
    return FilePart(modality="document", file_id=file.file_id or "", provider_metadata=envelope)


def _assistant_parts(message: openai.AssistantMessage) -> tuple[list[CanonicalPart], Any]:
    parts: list[CanonicalPart] = []
    extras = dict(message.model_extra or {})

    if isinstance(message.content, str):
        parts.append(TextPart(content=message.content))
    elif message.content:
        for item in message.content:
            if isinstance(item, openai.TextPart):
                parts.append(TextPart(content=item.text, provider_metadata=vendor_envelope(item)))
            else:
                parts.append(TextPart(content=item.refusal, provider_metadata=vendor_envelope(item, _REFUSAL)))

    if message.refusal:
        parts.append(TextPart(content=message.refusal, provider_metadata=vendor_envelope(None, _REFUSAL)))

    for call in message.tool_calls or []:
        parts.append(_tool_call_to_canonical(call))

    if message.function_call is not None:
        parts.append(
            ToolCallPart(
                id=None,
                name=message.function_call.name,
                arguments=parse_json_if_string(message.function_call.arguments),
                provider_metadata=vendor_envelope(message.function_call),
            )
        )

    audio = extras.get("audio")
    if isinstance(audio, dict) and audio.get("data"):
        extras.pop("audio")
        envelope = vendor_envelope({"audio": audio})
        parts.append(BlobPart(modality="audio", content=audio["data"], provider_metadata=envelope))

    return parts, vendor_envelope(extras)


def _tool_call_to_canonical(call: openai.FunctionToolCall | openai.CustomToolCall) -> ToolCallPart:
    if isinstance(call, openai.FunctionToolCall):
        name, arguments = call.function.name, parse_json_if_string(call.function.arguments)
        extras = {**(call.model_extra or {}), **_nested_extras(call.function, "name", "arguments")}
    else:
        name, arguments = call.custom.name, call.custom.input
        extras = {**(call.model_extra or {}), **_nested_extras(call.custom, "name", "input")}
    return ToolCallPart(id=call.id, name=name, arguments=arguments, provider_metadata=vendor_envelope(extras))
