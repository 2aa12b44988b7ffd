"""Tests for the GenAI (canonical) adapter."""

from __future__ import annotations

from rosetta.core.metadata import get_known_fields
from rosetta.core.models import CanonicalMessage, GenericPart, TextPart
from rosetta.providers.genai import GenAIAdapter
from rosetta.providers.genai.adapter import reinsert_system


class TestToCanonical:
    def setup_method(self) -> None:
        self.adapter = GenAIAdapter()

    def test_unknown_fields_move_into_envelope(self) -> None:
        result = self.adapter.to_canonical(
            [{"role": "user", "id": "m1", "parts": [{"type": "text", "content": "hi", "lang": "en"}]}]
        )
        message = result.messages[0]
        assert message.extra_fields == {}
        assert message.provider_metadata is not None
        assert message.provider_metadata.opaque == {"id": "m1"}
        part = message.parts[0]
        assert part.extra_fields == {}
        assert part.provider_metadata is not None
        assert part.provider_metadata.opaque == {"lang": "en"}

    def test_allow_listed_extras_become_known_fields(self) -> None:
        result = self.adapter.to_canonical(
            [{"role": "tool", "parts": [{"type": "tool_call_response", "id": "t1", "response": 1, "toolName": "f"}]}]
        )
        assert get_known_fields(result.messages[0].parts[0].provider_metadata).tool_name == "f"

    def test_generic_parts_keep_their_payload(self) -> None:
        result = self.adapter.to_canonical(
            [{"role": "assistant", "parts": [{"type": "citation", "url": "https://example.com"}]}]
        )
        part = result.messages[0].parts[0]
        assert isinstance(part, GenericPart)
        assert part.extra_fields == {"url": "https://example.com"}

    def test_string_shorthand(self) -> None:
        expected = CanonicalMessage.from_text("user", "hi").to_wire()
        assert self.adapter.to_canonical("hi").messages[0].to_wire() == expected
        output = self.adapter.to_canonical("hi", direction="output")
        assert output.messages[0].role == "assistant"

    def test_string_system_goes_first(self) -> None:
        result = self.adapter.to_canonical([{"role": "user", "parts": [{"type": "text", "content": "q"}]}], "be brief")
        assert [m.role for m in result.messages] == ["system", "user"]
        assert result.messages[0].text == "be brief"

    def test_system_reinserted_at_message_index(self) -> None:
        messages = [
            {"role": "user", "parts": [{"type": "text", "content": "u1"}]},
            {"role": "assistant", "parts": [{"type": "text", "content": "a1"}]},
            {"role": "user", "parts": [{"type": "text", "content": "u2"}]},
        ]
        system = [
            {"type": "text", "content": "late", "_provider_metadata": {"_known_fields": {"messageIndex": 2}}},
        ]
        result = self.adapter.to_canonical(messages, system)
        assert [m.role for m in result.messages] == ["user", "assistant", "system", "user"]
        assert result.messages[2].parts[0].provider_metadata is None


class TestReinsertSystem:
    def test_unindexed_first_then_ascending(self) -> None:
        messages = [CanonicalMessage.from_text("user", "u"), CanonicalMessage.from_text("assistant", "a")]
        indexed = TextPart.model_validate(
            {"type": "text", "content": "second", "_provider_metadata": {"_known_fields": {"messageIndex": 2}}}
        )
        result = reinsert_system(messages, [indexed, TextPart(content="first")])
        assert [m.text for m in result] == ["first", "u", "second", "a"]

    def test_index_past_end_appends(self) -> None:
        part = TextPart.model_validate(
            {"type": "text", "content": "s", "_provider_metadata": {"_known_fields": {"messageIndex": 99}}}
        )
        result = reinsert_system([CanonicalMessage.from_text("user", "u")], [part])
        assert [m.role for m in result] == ["user", "system"]

    def test_no_parts(self) -> None:
        messages = [CanonicalMessage.from_text("user", "u")]
        assert reinsert_system(messages, []) == messages


class TestFromCanonical:
    def setup_method(self) -> None:
        self.adapter = GenAIAdapter()
        self.messages = [
            CanonicalMessage.from_text("system", "rules"),
            CanonicalMessage.from_text("user", "u"),
            CanonicalMessage.from_text("system", "more rules"),
            CanonicalMessage.from_text("assistant", "a"),
        ]

    def test_system_message_without_parts_is_dropped(self) -> None:
        messages = [CanonicalMessage(role="system", parts=[]), CanonicalMessage.from_text("user", "u")]
        written = self.adapter.from_canonical(messages)
        assert written.system is None
        read = self.adapter.to_canonical(written.messages, written.system)
        assert [m.role for m in read.messages] == ["user"]

    def test_system_is_separated_with_position(self) -> None:
        result = self.adapter.from_canonical(self.messages)
        assert result.messages == [
            {"role": "user", "parts": [{"type": "text", "content": "u"}]},
            {"role": "assistant", "parts": [{"type": "text", "content": "a"}]},
        ]
        assert result.system == [
            {"type": "text", "content": "rules", "_provider_metadata": {"_known_fields": {"messageIndex": 0}}},
            {"type": "text", "content": "more rules", "_provider_metadata": {"_known_fields": {"messageIndex": 2}}},
        ]

    def test_position_survives_strip_mode(self) -> None:
        result = self.adapter.from_canonical(self.messages, metadata_mode="strip")
        assert result.system[1]["_provider_metadata"] == {"_known_fields": {"messageIndex": 2}}

    def test_no_system(self) -> None:
        result = self.adapter.from_canonical([CanonicalMessage.from_text("user", "u")])
        assert result.system is None

    def test_round_trip_restores_interleaving(self) -> None:
        written = self.adapter.from_canonical(self.messages)
        read = self.adapter.to_canonical(written.messages, written.system)
        assert [m.to_wire() for m in read.messages] == [m.to_wire() for m in self.messages]

    def test_strip_removes_envelopes(self) -> None:
        message = CanonicalMessage.model_validate(
            {
                "role": "user",
                "parts": [{"type": "text", "content": "u", "_provider_metadata": {"x": 1}}],
                "_provider_metadata": {"y": 2},
            }
        )
        result = self.adapter.from_canonical([message], metadata_mode="strip")
        assert result.messages == [{"role": "user", "parts": [{"type": "text", "content": "u"}]}]

    def test_passthrough_spreads_opaque_fields(self) -> None:
        message = CanonicalMessage.model_validate(
            {"role": "user", "parts": [{"type": "text", "content": "u"}], "_provider_metadata": {"id": "m1"}}
        )
        result = self.adapter.from_canonical([message], metadata_mode="passthrough")
        assert result.messages == [{"role": "user", "parts": [{"type": "text", "content": "u"}], "id": "m1"}]
