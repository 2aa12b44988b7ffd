"""Tests for the Promptl adapter."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rosetta.core.metadata import get_known_fields
from rosetta.core.models import (
    BlobPart,
    CanonicalMessage,
    GenericPart,
    ReasoningPart,
    ToolCallPart,
    ToolCallResponsePart,
    UriPart,
)
from rosetta.providers.promptl import PromptlAdapter

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _tool_conversation() -> list[CanonicalMessage]:
    return [
        CanonicalMessage.from_text("user", "Weather in Paris?"),
        CanonicalMessage(
            role="assistant",
            parts=[ToolCallPart(id="call_1", name="get_weather", arguments={"city": "Paris"})],
        ),
        CanonicalMessage(role="tool", parts=[ToolCallResponsePart(id="call_1", response={"temp": 18})]),
    ]


class TestToCanonical:
    def setup_method(self) -> None:
        self.adapter = PromptlAdapter()

    def test_string_content(self) -> None:
        result = self.adapter.to_canonical([{"role": "user", "content": "hi", "name": "ana"}])
        message = result.messages[0]
        assert message.text == "hi"
        assert message.name == "ana"

    def test_tool_call_and_result(self) -> None:
        result = self.adapter.to_canonical(
            [
                {
                    "role": "assistant",
                    "content": [{"type": "tool-call", "toolCallId": "c1", "toolName": "f", "toolArguments": {"a": 1}}],
                },
                {
                    "role": "tool",
                    "content": [
                        {"type": "tool-result", "toolCallId": "c1", "toolName": "f", "result": "boom", "isError": True}
                    ],
                },
            ]
        )
        call = result.messages[0].parts[0]
        assert isinstance(call, ToolCallPart)
        assert (call.id, call.name, call.arguments) == ("c1", "f", {"a": 1})

        response = result.messages[1].parts[0]
        assert isinstance(response, ToolCallResponsePart)
        assert response.response == "boom"
        known = get_known_fields(response.provider_metadata)
        assert known.tool_name == "f"
        assert known.is_error is True

    def test_successful_result_has_no_error_flag(self) -> None:
        result = self.adapter.to_canonical(
            [
                {
                    "role": "tool",
                    "content": [
                        {"type": "tool-result", "toolCallId": "c1", "toolName": "f", "result": 1, "isError": False}
                    ],
                }
            ]
        )
        assert get_known_fields(result.messages[0].parts[0].provider_metadata).is_error is None

    def test_legacy_tool_message(self) -> None:
        result = self.adapter.to_canonical(
            [{"role": "tool", "toolName": "f", "toolId": "c1", "content": [{"type": "text", "text": "42"}]}]
        )
        part = result.messages[0].parts[0]
        assert isinstance(part, ToolCallResponsePart)
        assert part.id == "c1"
        assert part.response == "42"
        assert get_known_fields(part.provider_metadata).tool_name == "f"

    def test_assistant_tool_calls_array(self) -> None:
        result = self.adapter.to_canonical(
            [
                {
                    "role": "assistant",
                    "content": [{"type": "tool-call", "toolCallId": "c1", "toolName": "f", "args": {}}],
                    "toolCalls": [
                        {"id": "c1", "name": "f", "arguments": {}},
                        {"id": "c2", "name": "g", "arguments": {"x": 1}},
                    ],
                }
            ]
        )
        calls = [part for part in result.messages[0].parts if isinstance(part, ToolCallPart)]
        assert [call.id for call in calls] == ["c1", "c2"]

    def test_media(self) -> None:
        result = self.adapter.to_canonical(
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "image", "image": "https://example.com/cat.png"},
                        {"type": "image", "image": b"\x00\x01"},
                        {"type": "file", "file": "JVBERi0=", "mimeType": "application/pdf"},
                    ],
                }
            ]
        )
        url, raw, pdf = result.messages[0].parts
        assert isinstance(url, UriPart)
        assert url.modality == "image"
        assert isinstance(raw, BlobPart)
        assert raw.content == "AAE="
        assert isinstance(pdf, BlobPart)
        assert (pdf.modality, pdf.mime_type) == ("document", "application/pdf")

    def test_redacted_reasoning(self) -> None:
        result = self.adapter.to_canonical(
            [{"role": "assistant", "content": [{"type": "redacted-reasoning", "data": "xyz"}]}]
        )
        part = result.messages[0].parts[0]
        assert isinstance(part, ReasoningPart)
        assert part.content == "xyz"
        assert get_known_fields(part.provider_metadata).original_type == "redacted-reasoning"

    def test_invalid_message(self) -> None:
        with pytest.raises(ValidationError):
            self.adapter.to_canonical([{"role": "robot", "content": "hi"}])


class TestFromCanonical:
    def setup_method(self) -> None:
        self.adapter = PromptlAdapter()

    def test_tool_conversation(self) -> None:
        result = self.adapter.from_canonical(_tool_conversation())
        assert result.system is None
        assert result.messages == [
            {"role": "user", "content": [{"type": "text", "text": "Weather in Paris?"}]},
            {
                "role": "assistant",
                "content": [
                    {
                        "type": "tool-call",
                        "toolCallId": "call_1",
                        "toolName": "get_weather",
                        "args": {"city": "Paris"},
                        "toolArguments": {"city": "Paris"},
                    }
                ],
            },
            {
                "role": "tool",
                "toolName": "get_weather",
                "toolId": "call_1",
                "content": [
                    {
                        "type": "tool-result",
                        "toolCallId": "call_1",
                        "toolName": "get_weather",
                        "result": {"temp": 18},
                        "isError": False,
                    }
                ],
            },
        ]

    def test_unknown_tool_name(self) -> None:
        messages = [CanonicalMessage(role="tool", parts=[ToolCallResponsePart(id="x", response=1)])]
        result = self.adapter.from_canonical(messages)
        assert result.messages[0]["toolName"] == "unknown"

    def test_unknown_role_becomes_user(self) -> None:
        result = self.adapter.from_canonical([CanonicalMessage.from_text("critic", "meh")])
        assert result.messages[0]["role"] == "user"

    def test_metadata_uses_compact_keys(self) -> None:
        message = CanonicalMessage.model_validate(
            {
                "role": "user",
                "parts": [{"type": "text", "content": "hi", "_provider_metadata": {"cache": True}}],
                "_provider_metadata": {"id": "m1"},
            }
        )
        result = self.adapter.from_canonical([message])
        assert result.messages == [
            {
                "role": "user",
                "content": [{"type": "text", "text": "hi", "_providerMetadata": {"cache": True}}],
                "_providerMetadata": {"id": "m1"},
            }
        ]

    def test_generic_part_round_trip(self) -> None:
        message = CanonicalMessage(
            role="assistant",
            parts=[GenericPart.model_validate({"type": "citation", "content": "see [1]", "url": "https://x"})],
        )
        written = self.adapter.from_canonical([message])
        content = written.messages[0]["content"][0]
        assert content["type"] == "text"
        assert content["_providerMetadata"]["_knownFields"] == {"originalType": "citation"}

        read = self.adapter.to_canonical(written.messages)
        part = read.messages[0].parts[0]
        assert isinstance(part, GenericPart)
        assert part.type == "citation"
        assert part.extra_fields == {"content": "see [1]"}

    def test_redacted_reasoning_round_trip(self) -> None:
        part = ReasoningPart.model_validate(
            {
                "type": "reasoning",
                "content": "xyz",
                "_provider_metadata": {"_known_fields": {"originalType": "redacted-reasoning"}},
            }
        )
        written = self.adapter.from_canonical([CanonicalMessage(role="assistant", parts=[part])])
        assert written.messages[0]["content"] == [{"type": "redacted-reasoning", "data": "xyz"}]

    def test_round_trip(self) -> None:
        written = self.adapter.from_canonical(_tool_conversation())
        read = self.adapter.to_canonical(written.messages)
        assert [m.role for m in read.messages] == ["user", "assistant", "tool"]
        response = read.messages[2].parts[0]
        assert isinstance(response, ToolCallResponsePart)
        assert response.response == {"temp": 18}
        assert get_known_fields(response.provider_metadata).tool_name == "get_weather"
