"""Tests for the canonical message and part models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rosetta.core.metadata import get_known_fields
from rosetta.core.models import (
    MESSAGE_LIST,
    BlobPart,
    CanonicalMessage,
    GenericPart,
    ReasoningPart,
    TextPart,
    ToolCallPart,
    ToolCallResponsePart,
    UriPart,
    parse_part,
)


class TestParts:
    def test_discriminates_known_types(self) -> None:
        assert isinstance(parse_part({"type": "text", "content": "hi"}), TextPart)
        assert isinstance(parse_part({"type": "reasoning", "content": "hmm"}), ReasoningPart)
        assert isinstance(parse_part({"type": "uri", "modality": "image", "uri": "https://x/y.png"}), UriPart)
        assert isinstance(parse_part({"type": "tool_call", "name": "f"}), ToolCallPart)
        assert isinstance(parse_part({"type": "tool_call_response", "response": 1}), ToolCallResponsePart)

    def test_unknown_type_is_generic(self) -> None:
        part = parse_part({"type": "citation", "url": "https://example.com"})
        assert isinstance(part, GenericPart)
        assert part.type == "citation"
        assert part.extra_fields == {"url": "https://example.com"}

    def test_known_type_with_bad_shape_fails(self) -> None:
        with pytest.raises(ValidationError):
            parse_part({"type": "blob", "modality": "image"})

    @pytest.mark.parametrize("part_type", [["text"], {"kind": "text"}, 3])
    def test_non_string_type_fails_validation(self, part_type: object) -> None:
        with pytest.raises(ValidationError):
            parse_part({"type": part_type})

    def test_open_modality(self) -> None:
        part = BlobPart(modality="hologram", content="AAAA")
        assert part.modality == "hologram"

    def test_frozen(self) -> None:
        part = TextPart(content="hi")
        with pytest.raises(ValidationError):
            part.content = "bye"  # type: ignore[misc]

    def test_envelope_from_wire_key(self) -> None:
        part = parse_part(
            {"type": "text", "content": "hi", "_providerMetadata": {"_knownFields": {"originalType": "x"}}}
        )
        assert get_known_fields(part.provider_metadata).original_type == "x"
        assert "_providerMetadata" not in part.extra_fields


class TestToWire:
    def test_omits_unset_optionals(self) -> None:
        part = ToolCallPart(name="lookup")
        assert part.to_wire() == {"type": "tool_call", "name": "lookup"}

    def test_keeps_extras_and_envelope(self) -> None:
        part = TextPart.model_validate(
            {"type": "text", "content": "hi", "lang": "en", "_provider_metadata": {"cache": True}}
        )
        assert part.to_wire() == {
            "type": "text",
            "content": "hi",
            "lang": "en",
            "_provider_metadata": {"cache": True},
        }

    def test_message(self) -> None:
        message = CanonicalMessage(role="assistant", parts=[TextPart(content="done")], finish_reason="stop")
        assert message.to_wire() == {
            "role": "assistant",
            "parts": [{"type": "text", "content": "done"}],
            "finish_reason": "stop",
        }


class TestCanonicalMessage:
    def test_open_role(self) -> None:
        message = CanonicalMessage(role="developer", parts=[])
        assert message.role == "developer"

    def test_text_joins_text_parts(self) -> None:
        message = CanonicalMessage(
            role="assistant",
            parts=[TextPart(content="a"), ReasoningPart(content="skip"), TextPart(content="b")],
        )
        assert message.text == "ab"

    def test_from_text(self) -> None:
        message = CanonicalMessage.from_text("user", "hello")
        assert message.parts == [TextPart(content="hello")]

    def test_parts_required(self) -> None:
        with pytest.raises(ValidationError):
            CanonicalMessage.model_validate({"role": "user"})

    def test_message_list(self) -> None:
        messages = MESSAGE_LIST.validate_python(
            [{"role": "user", "parts": [{"type": "text", "content": "hi"}], "_provider_metadata": {"id": "m1"}}]
        )
        envelope = messages[0].provider_metadata
        assert envelope is not None
        assert envelope.opaque == {"id": "m1"}
