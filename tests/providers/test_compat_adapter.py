"""Tests for the best-effort compat adapter."""

from __future__ import annotations

from rosetta.core.metadata import get_known_fields
from rosetta.core.models import (
    BlobPart,
    FilePart,
    GenericPart,
    ReasoningPart,
    TextPart,
    ToolCallPart,
    ToolCallResponsePart,
    UriPart,
)
from rosetta.providers.compat import CompatAdapter
from rosetta.providers.compat.adapter import detect_role


class TestDetectRole:
    def test_aliases(self) -> None:
        assert detect_role({"role": "model"}, "input") == "assistant"
        assert detect_role({"role": "function"}, "input") == "tool"
        assert detect_role({"role": "USER"}, "output") == "user"

    def test_missing_role_follows_direction(self) -> None:
        assert detect_role({}, "input") == "user"
        assert detect_role({}, "output") == "assistant"


class TestMessages:
    def setup_method(self) -> None:
        self.adapter = CompatAdapter()

    def test_role_and_string_content(self) -> None:
        result = self.adapter.to_canonical([{"role": "assistant", "content": "hi", "name": "bot"}])
        message = result.messages[0]
        assert (message.role, message.text, message.name) == ("assistant", "hi", "bot")

    def test_text_and_message_keys(self) -> None:
        result = self.adapter.to_canonical([{"sender": "human", "message": "Hello"}, {"text": "Hey"}])
        assert [m.text for m in result.messages] == ["Hello", "Hey"]
        assert [m.role for m in result.messages] == ["user", "user"]

    def test_unrecognized_message_becomes_json(self) -> None:
        result = self.adapter.to_canonical([{"foo": "bar", "baz": 123}])
        assert result.messages[0].text == '{"foo":"bar","baz":123}'

    def test_message_level_reasoning_comes_first(self) -> None:
        result = self.adapter.to_canonical([{"role": "assistant", "content": "4", "thinking": "2+2"}])
        reasoning, text = result.messages[0].parts
        assert isinstance(reasoning, ReasoningPart)
        assert reasoning.content == "2+2"
        assert isinstance(text, TextPart)

    def test_refusal(self) -> None:
        result = self.adapter.to_canonical([{"role": "assistant", "refusal": "no"}])
        part = result.messages[0].parts[0]
        assert get_known_fields(part.provider_metadata).is_refusal is True

    def test_openai_tool_calls(self) -> None:
        result = self.adapter.to_canonical(
            [
                {
                    "role": "assistant",
                    "tool_calls": [{"id": "c1", "type": "function", "function": {"name": "f", "arguments": "{}"}}],
                },
                {"role": "tool", "tool_call_id": "c1", "name": "f", "content": "42"},
            ]
        )
        call = result.messages[0].parts[0]
        assert isinstance(call, ToolCallPart)
        assert (call.id, call.name, call.arguments) == ("c1", "f", {})

        response = result.messages[1].parts[0]
        assert isinstance(response, ToolCallResponsePart)
        assert (response.id, response.response) == ("c1", "42")
        assert get_known_fields(response.provider_metadata).tool_name == "f"

    def test_legacy_function_call(self) -> None:
        result = self.adapter.to_canonical(
            [{"role": "assistant", "function_call": {"name": "f", "arguments": '{"a": 1}'}}]
        )
        part = result.messages[0].parts[0]
        assert isinstance(part, ToolCallPart)
        assert part.arguments == {"a": 1}

    def test_existing_envelope_is_kept(self) -> None:
        result = self.adapter.to_canonical(
            [{"role": "user", "content": "hi", "_providerMetadata": {"_knownFields": {"originalType": "x"}}}]
        )
        assert get_known_fields(result.messages[0].provider_metadata).original_type == "x"

    def test_system(self) -> None:
        result = self.adapter.to_canonical([{"role": "user", "content": "hi"}], {"text": "rules"})
        assert [m.role for m in result.messages] == ["system", "user"]
        assert result.messages[0].text == "rules"

    def test_string_shorthand(self) -> None:
        result = self.adapter.to_canonical("hello")
        assert result.messages[0].text == "hello"


class TestParts:
    def setup_method(self) -> None:
        self.adapter = CompatAdapter()

    def _parts(self, content: list[dict[str, object]]) -> list[object]:
        return list(self.adapter.to_canonical([{"role": "user", "content": content}]).messages[0].parts)

    def test_typed_parts(self) -> None:
        parts = self._parts(
            [
                {"type": "text", "text": "look"},
                {"type": "image_url", "image_url": {"url": "https://x/cat.png"}},
                {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "iVBO"}},
                {"type": "input_audio", "input_audio": {"data": "UklG", "format": "wav"}},
                {"type": "file", "file": {"file_id": "file-1"}},
            ]
        )
        text, url, image, audio, file = parts
        assert isinstance(text, TextPart)
        assert isinstance(url, UriPart)
        assert isinstance(image, BlobPart)
        assert image.mime_type == "image/png"
        assert isinstance(audio, BlobPart)
        assert audio.mime_type == "audio/wav"
        assert isinstance(file, FilePart)
        assert file.file_id == "file-1"

    def test_tool_parts(self) -> None:
        parts = self._parts(
            [
                {"type": "tool_use", "id": "tu_1", "name": "f", "input": {"a": 1}},
                {"type": "tool-call", "toolCallId": "c2", "toolName": "g", "args": {}},
                {"type": "tool_result", "tool_use_id": "tu_1", "content": "ok"},
            ]
        )
        first, second, result = parts
        assert isinstance(first, ToolCallPart)
        assert (first.id, first.name) == ("tu_1", "f")
        assert isinstance(second, ToolCallPart)
        assert (second.id, second.name) == ("c2", "g")
        assert isinstance(result, ToolCallResponsePart)
        assert (result.id, result.response) == ("tu_1", "ok")

    def test_redacted_reasoning(self) -> None:
        parts = self._parts([{"type": "redacted_thinking", "data": "enc"}])
        part = parts[0]
        assert isinstance(part, ReasoningPart)
        assert get_known_fields(part.provider_metadata).original_type == "redacted_thinking"

    def test_unknown_typed_part_is_generic(self) -> None:
        parts = self._parts([{"type": "citation", "url": "https://x"}])
        part = parts[0]
        assert isinstance(part, GenericPart)
        assert part.type == "citation"
        assert part.extra_fields == {"url": "https://x"}

    def test_gemini_style_parts(self) -> None:
        result = self.adapter.to_canonical(
            [
                {
                    "role": "model",
                    "parts": [
                        {"text": "thinking...", "thought": True},
                        {"inlineData": {"mimeType": "image/png", "data": "iVBO"}},
                        {"functionCall": {"name": "f", "args": {}}},
                        {"mystery": 1},
                    ],
                }
            ]
        )
        message = result.messages[0]
        assert message.role == "assistant"
        thought, inline, call, unknown = message.parts
        assert isinstance(thought, ReasoningPart)
        assert isinstance(inline, BlobPart)
        assert inline.modality == "image"
        assert isinstance(call, ToolCallPart)
        assert isinstance(unknown, GenericPart)
        assert unknown.type == "unknown"
        assert unknown.extra_fields == {"mystery": 1}
