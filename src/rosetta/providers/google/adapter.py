"""Google Gemini adapter (read-only)."""

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
from rosetta.providers.base import ToCanonicalResult, compact, shorthand_role, vendor_envelope
from rosetta.providers.google import models as google
from rosetta.utils.fields import infer_modality

ROLES: dict[str, str] = {"model": "assistant", "user": "user", "system": "system"}


class GoogleAdapter:
    """Reads Gemini ``Content`` lists and system instructions."""

    provider = "google"
    name = "Google Gemini"
    message_schema: TypeAdapter[list[google.Content]] = google.MESSAGE_LIST
    system_schema: TypeAdapter[Any] | None = google.SYSTEM

    def to_canonical(
        self,
        messages: str | list[Any],
        system: Any = None,
        direction: Direction = "input",
    ) -> ToCanonicalResult:
        if isinstance(messages, str):
            message = CanonicalMessage(role=shorthand_role(direction), parts=[TextPart(content=messages)])
            return ToCanonicalResult(messages=[message])
        parsed = google.MESSAGE_LIST.validate_python(messages)

        converted: list[CanonicalMessage] = []
        if system is not None:
            converted.append(_system_to_canonical(google.SYSTEM.validate_python(system)))
        converted.extend(_content_to_canonical(content, direction) for content in parsed)
        return ToCanonicalResult(messages=converted)


def map_role(role: str | None, direction: Direction) -> str:
    """Canonical role for a Gemini role; missing or unknown roles follow *direction*."""
    if role in ROLES:
        return ROLES[role]
    return shorthand_role(direction)


def _system_to_canonical(system: str | google.Content | list[google.Part] | google.Part) -> CanonicalMessage:
    if isinstance(system, str):
        return CanonicalMessage(role="system", parts=[TextPart(content=system)])
    if isinstance(system, google.Content):
        parts = system.parts
    elif isinstance(system, list):
        parts = system
    else:
        parts = [system]
    return CanonicalMessage(role="system", parts=[_part_to_canonical(part) for part in parts])


def _content_to_canonical(content: google.Content, direction: Direction) -> CanonicalMessage:
    return CanonicalMessage(
        role=map_role(content.role, direction),
        parts=[_part_to_canonical(part) for part in content.parts],
        provider_metadata=vendor_envelope(content),
    )


def _part_to_canonical(part: google.Part) -> CanonicalPart:
    extras = dict(part.model_extra or {})
    if part.thought_signature:
        extras["thoughtSignature"] = part.thought_signature

    if part.text is not None:
        if part.thought:
            return ReasoningPart(content=part.text, provider_metadata=vendor_envelope(extras))
        return TextPart(content=part.text, provider_metadata=vendor_envelope(extras))

    if part.inline_data is not None:
        blob = part.inline_data
        return BlobPart(
            modality=infer_modality(blob.mime_type),
            mime_type=blob.mime_type,
            content=blob.data or "",
            provider_metadata=vendor_envelope({**extras, **(blob.model_extra or {})}),
        )

    if part.file_data is not None:
        file = part.file_data
        return UriPart(
            modality=infer_modality(file.mime_type),
            mime_type=file.mime_type,
            uri=file.file_uri or "",
            provider_metadata=vendor_envelope({**extras, **(file.model_extra or {})}),
        )

    if part.function_call is not None:
        call = part.function_call
        return ToolCallPart(
            id=call.id,
            name=call.name or "",
            arguments=call.args,
            provider_metadata=vendor_envelope({**extras, **(call.model_extra or {})}),
        )

    if part.function_response is not None:
        result = part.function_response
        known = {"tool_name": result.name} if result.name else None
        return ToolCallResponsePart(
            id=result.id,
            response=result.response,
            provider_metadata=vendor_envelope({**extras, **(result.model_extra or {})}, known),
        )

    if part.executable_code is not None:
        code = part.executable_code
        payload = compact(type="executable_code", code=code.code or "", language=code.language)
        return GenericPart.model_validate(
            {**payload, "provider_metadata": vendor_envelope({**extras, **(code.model_extra or {})})}
        )

    outcome = part.code_execution_result
    assert outcome is not None
    payload = compact(type="code_execution_result", outcome=outcome.outcome, output=outcome.output or "")
    return GenericPart.model_validate(
        {**payload, "provider_metadata": vendor_envelope({**extras, **(outcome.model_extra or {})})}
    )
