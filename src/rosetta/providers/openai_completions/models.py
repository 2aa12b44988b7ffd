"""OpenAI Chat Completions message schema (requests and responses)."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class CompletionsModel(BaseModel):
    model_config = ConfigDict(extra="allow")


# ---------------------------------------------------------------------------
# Content parts
# ---------------------------------------------------------------------------


class TextPart(CompletionsModel):
    type: Literal["text"]
    text: str


class RefusalPart(CompletionsModel):
    type: Literal["refusal"]
    refusal: str


class ImageUrl(CompletionsModel):
    url: str
    detail: Literal["auto", "low", "high"] | None = None


class ImageUrlPart(CompletionsModel):
    type: Literal["image_url"]
    image_url: ImageUrl


class InputAudio(CompletionsModel):
    data: str
    format: Literal["wav", "mp3"]


class InputAudioPart(CompletionsModel):
    type: Literal["input_audio"]
    input_audio: InputAudio


class FileRef(CompletionsModel):
    filename: str | None = None
    file_data: str | None = None
    file_id: str | None = None


class FilePart(CompletionsModel):
    type: Literal["file"]
    file: FileRef


UserContentPart = Annotated[
    Union[TextPart, ImageUrlPart, InputAudioPart, FilePart],
    Field(discriminator="type"),
]
AssistantContentPart = Annotated[Union[TextPart, RefusalPart], Field(discriminator="type")]

TextContent = Union[str, Annotated[list[TextPart], Field(min_length=1)]]


# ---------------------------------------------------------------------------
# Tool calls
# ---------------------------------------------------------------------------


class FunctionSpec(CompletionsModel):
    name: str
    arguments: str


class FunctionToolCall(CompletionsModel):
    id: str
    type: Literal["function"]
    function: FunctionSpec


class CustomSpec(CompletionsModel):
    name: str
    input: str


class CustomToolCall(CompletionsModel):
    id: str
    type: Literal["custom"]
    custom: CustomSpec


ToolCall = Annotated[Union[FunctionToolCall, CustomToolCall], Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class DeveloperMessage(CompletionsModel):
    role: Literal["developer"]
    content: TextContent
    name: str | None = None


class SystemMessage(CompletionsModel):
    role: Literal["system"]
    content: TextContent
    name: str | None = None


class UserMessage(CompletionsModel):
    role: Literal["user"]
    content: Union[str, Annotated[list[UserContentPart], Field(min_length=1)]]
    name: str | None = None


class AssistantMessage(CompletionsModel):
    role: Literal["assistant"]
    content: Union[str, Annotated[list[AssistantContentPart], Field(min_length=1)], None] = None
    refusal: str | None = None
    name: str | None = None
    tool_calls: list[ToolCall] | None = None
    function_call: FunctionSpec | None = None


class ToolMessage(CompletionsModel):
    role: Literal["tool"]
    content: TextContent
    tool_call_id: str


class FunctionMessage(CompletionsModel):
    """Deprecated ``function`` role message."""

    role: Literal["function"]
    content: str | None
    name: str


CompletionsMessage = Annotated[
    Union[DeveloperMessage, SystemMessage, UserMessage, AssistantMessage, ToolMessage, FunctionMessage],
    Field(discriminator="role"),
]

MESSAGE_LIST: TypeAdapter[list[CompletionsMessage]] = TypeAdapter(list[CompletionsMessage])
