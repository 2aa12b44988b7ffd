"""OpenAI Responses adapter (read-only).

Each Responses item becomes one canonical message: function calls and
reasoning items are assistant turns, function outputs are tool turns, and
item types without a dedicated mapping are kept whole as generic parts.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from rosetta.config import Direction
from rosetta.core.metadata import combine_envelopes
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
from rosetta.providers.base import ToCanonicalResult, shorthand_role, vendor_envelope
from rosetta.providers.openai_responses import models as responses
from rosetta.utils.fields import parse_data_url, parse_json_if_string

TOOL_OUTPUT_ITEM_TYPES = frozenset({"computer_call_output", "local_shell_call_output", "function_call_output"})


class OpenAIResponsesAdapter:
    """Reads OpenAI Responses input and output items."""

    provider = "openai_responses"
    name = "OpenAI Responses"
    message_schema: TypeAdapter[list[responses.ResponsesItem]] = responses.MESSAGE_LIST
    system_schema: TypeAdapter[Any] | None = None

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            messages = [{"role": shorthand_role(direction), "content": messages}]
        items = responses.MESSAGE_LIST.validate_python(messages)
        return ToCanonicalResult(messages=[_item_to_canonical(item) for item in items])


def _item_to_canonical(item: Any) -> CanonicalMessage:
    if isinstance(item, responses.MessageItem):
        return _message_to_canonical(item)

    if isinstance(item, responses.FunctionCallItem):
        part = ToolCallPart(
            id=item.call_id,
            name=item.name,
            arguments=parse_json_if_string(item.arguments),
            provider_metadata=vendor_envelope(item),
        )
        return CanonicalMessage(role="assistant", parts=[part])

    if isinstance(item, responses.FunctionCallOutputItem):
        response = ToolCallResponsePart(
            id=item.call_id,
            response=parse_json_if_string(item.output),
            provider_metadata=vendor_envelope(item),
        )
        return CanonicalMessage(role="tool", parts=[response])

    if isinstance(item, responses.ReasoningItem):
        return _reasoning_to_canonical(item)

    role = "tool" if item.type in TOOL_OUTPUT_ITEM_TYPES else "assistant"
    return CanonicalMessage(role=role, parts=[GenericPart.model_validate(item.model_dump())])


def _message_to_canonical(item: responses.MessageItem) -> CanonicalMessage:
    parts: list[CanonicalPart]
    if isinstance(item.content, str):
        parts = [TextPart(content=item.content)]
    else:
        parts = [_content_to_canonical(part) for part in item.content]
    return CanonicalMessage(role=item.role, parts=parts, provider_metadata=vendor_envelope(item))


def _content_to_canonical(part: Any) -> CanonicalPart:
    if isinstance(part, responses.TextPart):
        return TextPart(content=part.text, provider_metadata=vendor_envelope(part))

    if isinstance(part, responses.ImagePart):
        envelope = vendor_envelope({"detail": part.detail, **(part.model_extra or {})})
        if part.image_url:
            data_url = parse_data_url(part.image_url)
            if data_url is not None:
                mime_type, payload = data_url
                return BlobPart(
                    modality="image", mime_type=mime_type or "image/png", content=payload, provider_metadata=envelope
                )
            return UriPart(modality="image", uri=part.image_url, provider_metadata=envelope)
        return FilePart(modality="image", file_id=part.file_id or "", provider_metadata=envelope)

    if isinstance(part, responses.FilePart):
        envelope = vendor_envelope(part)
        if part.file_data:
            return BlobPart(modality="document", content=part.file_data, provider_metadata=envelope)
        return FilePart(modality="document", file_id=part.file_id or "", provider_metadata=envelope)

    if isinstance(part, responses.AudioPart):
        return BlobPart(
            modality="audio",
            mime_type="audio/wav" if part.format == "wav" else "audio/mp3",
            content=part.data,
            provider_metadata=vendor_envelope(part),
        )

    return TextPart(content=part.refusal, provider_metadata=vendor_envelope(part, {"is_refusal": True}))


def _reasoning_to_canonical(item: responses.ReasoningItem) -> CanonicalMessage:
    envelope = vendor_envelope(item)
    if not item.summary:
        return CanonicalMessage(role="assistant", parts=[], provider_metadata=envelope)

    parts: list[CanonicalPart] = []
    for index, summary in enumerate(item.summary):
        part_envelope = vendor_envelope(summary)
        if index == 0:
            # id, encrypted_content and status ride on the first summary
            part_envelope = combine_envelopes(envelope, part_envelope)
        parts.append(ReasoningPart(content=summary.text, provider_metadata=part_envelope))
    return CanonicalMessage(role="assistant", parts=parts)
