"""Promptl message schema.

Only the fields the adapter converts are declared; everything else is kept
as pydantic extras and ends up in the metadata envelope.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

BinaryData = Union[str, bytes]


class PromptlModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


class TextContent(PromptlModel):
    type: Literal["text"]
    text: str | None = None


class ImageContent(PromptlModel):
    type: Literal["image"]
    image: BinaryData


class FileContent(PromptlModel):
    type: Literal["file"]
    file: BinaryData
    mime_type: str = Field(alias="mimeType")


class ReasoningContent(PromptlModel):
    type: Literal["reasoning"]
    text: str


class RedactedReasoningContent(PromptlModel):
    type: Literal["redacted-reasoning"]
    data: str


class ToolCallContent(PromptlModel):
    """Tool call; ``toolArguments`` is the legacy spelling of ``args``."""

    type: Literal["tool-call"]
    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    args: dict[str, Any] | None = None
    tool_arguments: dict[str, Any] | None = Field(default=None, alias="toolArguments")

    @property
    def arguments(self) -> dict[str, Any]:
        if self.args is not None:
            return self.args
        return self.tool_arguments or {}


class ToolResultContent(PromptlModel):
    type: Literal["tool-result"]
    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    result: Any = None
    is_error: bool | None = Field(default=None, alias="isError")


PromptlContent = Annotated[
    Union[
        TextContent,
        ImageContent,
        FileContent,
        ReasoningContent,
        RedactedReasoningContent,
        ToolCallContent,
        ToolResultContent,
    ],
    Field(discriminator="type"),
]


class ToolCall(PromptlModel):
    """Entry of an assistant message's ``toolCalls`` array."""

    id: str
    name: str
    arguments: dict[str, Any]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class SystemMessage(PromptlModel):
    role: Literal["system"]
    content: str | list[PromptlContent]


class DeveloperMessage(PromptlModel):
    role: Literal["developer"]
    content: str | list[PromptlContent]


class UserMessage(PromptlModel):
    role: Literal["user"]
    content: str | list[PromptlContent]
    name: str | None = None


class AssistantMessage(PromptlModel):
    role: Literal["assistant"]
    content: str | list[PromptlContent]
    tool_calls: list[ToolCall] | None = Field(default=None, alias="toolCalls")


class ToolMessage(PromptlModel):
    """Tool message; ``toolName``/``toolId`` are the legacy message-level fields."""

    role: Literal["tool"]
    content: list[PromptlContent]
    tool_name: str | None = Field(default=None, alias="toolName")
    tool_id: str | None = Field(default=None, alias="toolId")


PromptlMessage = Annotated[
    Union[SystemMessage, DeveloperMessage, UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]

MESSAGE_LIST: TypeAdapter[list[PromptlMessage]] = TypeAdapter(list[PromptlMessage])
