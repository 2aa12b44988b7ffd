"""Anthropic Messages API schema (``MessageParam`` requests and ``Message`` responses)."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class AnthropicModel(BaseModel):
    model_config = ConfigDict(extra="allow")


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class Base64ImageSource(AnthropicModel):
    type: Literal["base64"]
    media_type: Literal["image/jpeg", "image/png", "image/gif", "image/webp"]
    data: str


class UrlSource(AnthropicModel):
    type: Literal["url"]
    url: str


class Base64PdfSource(AnthropicModel):
    type: Literal["base64"]
    media_type: Literal["application/pdf"]
    data: str


class PlainTextSource(AnthropicModel):
    type: Literal["text"]
    media_type: Literal["text/plain"]
    data: str


ImageSource = Annotated[Union[Base64ImageSource, UrlSource], Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


class TextBlock(AnthropicModel):
    type: Literal["text"]
    text: str


class ThinkingBlock(AnthropicModel):
    type: Literal["thinking"]
    thinking: str
    signature: str


class RedactedThinkingBlock(AnthropicModel):
    type: Literal["redacted_thinking"]
    data: str


class ToolUseBlock(AnthropicModel):
    type: Literal["tool_use"]
    id: str
    name: str
    input: Any = None


class ServerToolUseBlock(AnthropicModel):
    """Built-in tool invocation such as ``web_search``."""

    type: Literal["server_tool_use"]
    id: str
    name: str
    input: Any = None


class ToolResultBlock(AnthropicModel):
    type: Literal["tool_result"]
    tool_use_id: str
    content: Union[str, list[Any], None] = None
    is_error: bool | None = None


class ImageBlock(AnthropicModel):
    type: Literal["image"]
    source: ImageSource


class ContentSource(AnthropicModel):
    """Document made of nested text and image blocks."""

    type: Literal["content"]
    content: Union[str, list[Annotated[Union[TextBlock, ImageBlock], Field(discriminator="type")]]]


DocumentSource = Annotated[
    Union[Base64PdfSource, PlainTextSource, UrlSource, ContentSource],
    Field(discriminator="type"),
]


class DocumentBlock(AnthropicModel):
    type: Literal["document"]
    source: DocumentSource


class WebSearchToolResultBlock(AnthropicModel):
    type: Literal["web_search_tool_result"]
    tool_use_id: str
    content: Any = None


class SearchResultBlock(AnthropicModel):
    type: Literal["search_result"]
    source: str
    title: str
    content: list[TextBlock]


ContentBlock = Annotated[
    Union[
        TextBlock,
        ImageBlock,
        DocumentBlock,
        ThinkingBlock,
        RedactedThinkingBlock,
        ToolUseBlock,
        ToolResultBlock,
        ServerToolUseBlock,
        WebSearchToolResultBlock,
        SearchResultBlock,
    ],
    Field(discriminator="type"),
]

# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class AnthropicMessage(AnthropicModel):
    """Request and response messages; response-only fields are optional."""

    role: Literal["user", "assistant"]
    content: Union[str, Annotated[list[ContentBlock], Field(min_length=1)]]
    id: str | None = None
    type: Literal["message"] | None = None
    model: str | None = None
    stop_reason: str | None = None
    stop_sequence: str | None = None
    usage: dict[str, Any] | None = None


AnthropicSystem = Union[str, list[TextBlock]]

MESSAGE_LIST: TypeAdapter[list[AnthropicMessage]] = TypeAdapter(list[AnthropicMessage])
SYSTEM: TypeAdapter[AnthropicSystem] = TypeAdapter(AnthropicSystem)
