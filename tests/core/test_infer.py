"""Tests for source-format inference."""

from __future__ import annotations

from typing import Any

import pytest

from rosetta.core.infer import DEFAULT_INFER_PRIORITY, infer_provider
from rosetta.errors import ConfigurationError
from rosetta.providers.registry import Provider

# ---------------------------------------------------------------------------
# Fixtures: one full conversation per format
# ---------------------------------------------------------------------------

GENAI: list[dict[str, Any]] = [
    {"role": "system", "parts": [{"type": "text", "content": "You are a helpful assistant."}]},
    {"role": "user", "parts": [{"type": "text", "content": "What's the weather in NYC?"}]},
    {
        "role": "assistant",
        "parts": [
            {"type": "text", "content": "Let me check the weather for you."},
            {"type": "tool_call", "id": "tc_1", "name": "get_weather", "arguments": {"city": "NYC"}},
        ],
    },
    {
        "role": "tool",
        "parts": [{"type": "tool_call_response", "id": "tc_1", "response": {"temperature": "72F"}}],
    },
]

# array system content rules out Vercel AI, which only takes strings there
PROMPTL: list[dict[str, Any]] = [
    {"role": "system", "content": [{"type": "text", "text": "You are a helpful assistant."}]},
    {"role": "user", "content": "What's the weather in NYC?"},
    {
        "role": "assistant",
        "content": [
            {"type": "text", "text": "Let me check the weather for you."},
            {"type": "tool-call", "toolCallId": "tc_1", "toolName": "get_weather", "args": {"city": "NYC"}},
        ],
    },
    {
        "role": "tool",
        "content": [
            {"type": "tool-result", "toolCallId": "tc_1", "toolName": "get_weather", "result": {"temperature": "72F"}}
        ],
    },
]

OPENAI_COMPLETIONS: list[dict[str, Any]] = [
    {"role": "system", "content": "You are a helpful assistant."},
    {"role": "user", "content": "What's the weather in NYC?"},
    {
        "role": "assistant",
        "content": "Let me check the weather for you.",
        "tool_calls": [
            {"id": "call_1", "type": "function", "function": {"name": "get_weather", "arguments": '{"city":"NYC"}'}}
        ],
    },
    {"role": "tool", "content": '{"temperature":"72F"}', "tool_call_id": "call_1"},
]

OPENAI_RESPONSES: list[dict[str, Any]] = [
    {"type": "message", "role": "system", "content": "You are a helpful assistant."},
    {"type": "message", "role": "user", "content": "What's the weather in NYC?"},
    {
        "type": "message",
        "role": "assistant",
        "content": [{"type": "output_text", "text": "Let me check the weather for you."}],
    },
    {"type": "function_call", "call_id": "fc_1", "name": "get_weather", "arguments": '{"city":"NYC"}'},
    {"type": "function_call_output", "call_id": "fc_1", "output": '{"temperature":"72F"}'},
]

ANTHROPIC: list[dict[str, Any]] = [
    {"role": "user", "content": "What's the weather in NYC?"},
    {
        "role": "assistant",
        "content": [
            {"type": "text", "text": "Let me check the weather for you."},
            {"type": "tool_use", "id": "tu_1", "name": "get_weather", "input": {"city": "NYC"}},
        ],
    },
    {"role": "user", "content": [{"type": "tool_result", "tool_use_id": "tu_1", "content": '{"temperature":"72F"}'}]},
]

GOOGLE: list[dict[str, Any]] = [
    {"role": "user", "parts": [{"text": "What's the weather in NYC?"}]},
    {
        "role": "model",
        "parts": [
            {"text": "Let me check the weather for you."},
            {"functionCall": {"name": "get_weather", "args": {"city": "NYC"}}},
        ],
    },
    {"role": "user", "parts": [{"functionResponse": {"name": "get_weather", "response": {"temperature": "72F"}}}]},
]

VERCEL_AI: list[dict[str, Any]] = [
    {"role": "system", "content": "You are a helpful assistant."},
    {"role": "user", "content": "What's the weather in NYC?"},
    {
        "role": "assistant",
        "content": [
            {"type": "text", "text": "Let me check the weather for you."},
            {"type": "tool-call", "toolCallId": "tc_1", "toolName": "get_weather", "input": {"city": "NYC"}},
        ],
    },
    {
        "role": "tool",
        "content": [
            {
                "type": "tool-result",
                "toolCallId": "tc_1",
                "toolName": "get_weather",
                "output": {"type": "json", "value": {"temperature": "72F"}},
            }
        ],
    },
]


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestInferFromMessages:
    @pytest.mark.parametrize(
        ("messages", "expected"),
        [
            (GENAI, "genai"),
            (PROMPTL, "promptl"),
            (OPENAI_COMPLETIONS, "openai_completions"),
            (OPENAI_RESPONSES, "openai_responses"),
            (ANTHROPIC, "anthropic"),
            (GOOGLE, "google"),
            (VERCEL_AI, "vercel_ai"),
        ],
    )
    def test_full_conversations(self, messages: list[dict[str, Any]], expected: str) -> None:
        assert infer_provider(messages) == expected

    def test_anthropic_with_separate_system(self) -> None:
        assert infer_provider(ANTHROPIC, "You are a helpful assistant.") == "anthropic"

    def test_google_with_separate_system(self) -> None:
        system = {"role": "user", "parts": [{"text": "You are a helpful assistant."}]}
        assert infer_provider(GOOGLE, system) == "google"


class TestCompatFallback:
    @pytest.mark.parametrize(
        "messages",
        [
            [{"sender": "human", "message": "Hello"}, {"sender": "bot", "message": "Hi there!"}],
            [{"from": "user", "text": "What's the weather?", "timestamp": 1234567890}],
            [{"foo": "bar", "baz": 123, "nested": {"deep": True}}],
            [{"content": "System prompt", "kind": "system"}, {"content": "User question", "kind": "user"}],
        ],
    )
    def test_unknown_shapes(self, messages: list[dict[str, Any]]) -> None:
        assert infer_provider(messages) == "compat"

    def test_non_string_part_type(self) -> None:
        assert infer_provider([{"role": "user", "parts": [{"type": ["x"]}]}]) == "compat"
        assert infer_provider([{"role": "user", "parts": [{"type": {"kind": "text"}}]}]) == "compat"

    def test_empty_messages_without_system(self) -> None:
        assert infer_provider([]) == "compat"

    def test_custom_priority_without_match(self) -> None:
        messages = [{"sender": "human", "text": "Hello"}]
        assert infer_provider(messages, priority=["genai", "anthropic", "compat"]) == "compat"


class TestStringAndSystem:
    def test_string_messages_use_first_priority(self) -> None:
        assert infer_provider("Hello, how are you?") == "openai_completions"

    def test_string_messages_custom_priority(self) -> None:
        assert infer_provider("Hello", priority=["genai", "promptl"]) == "genai"

    def test_string_system_with_empty_messages(self) -> None:
        assert infer_provider([], "You are helpful") == "openai_completions"

    def test_structured_system_with_empty_messages(self) -> None:
        system = [{"type": "text", "content": "You are a helpful assistant."}]
        assert infer_provider([], system) == "genai"


class TestPriority:
    def test_default_contains_every_provider(self) -> None:
        for provider in Provider:
            assert provider.value in DEFAULT_INFER_PRIORITY

    def test_compat_is_last(self) -> None:
        assert DEFAULT_INFER_PRIORITY[-1] == "compat"

    def test_specific_before_generic(self) -> None:
        order = DEFAULT_INFER_PRIORITY.index
        assert order("openai_completions") < order("compat")
        assert order("genai") < order("promptl") < order("compat")

    def test_custom_priority_breaks_ties(self) -> None:
        messages = [{"role": "system", "content": "Hello"}, {"role": "user", "content": "Hi"}]
        assert infer_provider(messages) == "openai_completions"
        assert infer_provider(messages, priority=["vercel_ai", "openai_completions"]) == "vercel_ai"

    def test_unknown_ids_are_skipped(self) -> None:
        assert infer_provider(GENAI, priority=["no_such_provider", "genai"]) == "genai"

    def test_empty_priority_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot be empty"):
            infer_provider(GENAI, priority=[])
