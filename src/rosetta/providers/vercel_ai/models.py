"""Vercel AI SDK model-message schema."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

DataContent = Union[str, bytes]

ERROR_OUTPUT_TYPES: tuple[str, ...] = ("error-text", "error-json")
OUTPUT_TYPES: tuple[str, ...] = ("text", "json", "error-text", "error-json", "execution-denied", "content")


class VercelModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ---------------------------------------------------------------------------
# Tool result output
# ---------------------------------------------------------------------------


class TextOutput(VercelModel):
    type: Literal["text"]
    value: str


class JsonOutput(VercelModel):
    type: Literal["json"]
    value: Any = None


class ErrorTextOutput(VercelModel):
    type: Literal["error-text"]
    value: str


class ErrorJsonOutput(VercelModel):
    type: Literal["error-json"]
    value: Any = None


class ExecutionDeniedOutput(VercelModel):
    type: Literal["execution-denied"]
    reason: str | None = None


class ContentOutput(VercelModel):
    type: Literal["content"]
    value: list[dict[str, Any]]


ToolResultOutput = Annotated[
    Union[TextOutput, JsonOutput, ErrorTextOutput, ErrorJsonOutput, ExecutionDeniedOutput, ContentOutput],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Parts
# ---------------------------------------------------------------------------


class TextPart(VercelModel):
    type: Literal["text"]
    text: str


class ImagePart(VercelModel):
    type: Literal["image"]
    image: DataContent
    media_type: str | None = Field(default=None, alias="mediaType")


class FilePart(VercelModel):
    type: Literal["file"]
    data: DataContent
    media_type: str = Field(alias="mediaType")


class ReasoningPart(VercelModel):
    type: Literal["reasoning"]
    text: str


class ToolCallPart(VercelModel):
    type: Literal["tool-call"]
    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    input: Any = None


class ToolResultPart(VercelModel):
    type: Literal["tool-result"]
    tool_call_id: str = Field(alias="toolCallId")
    tool_name: str = Field(alias="toolName")
    output: ToolResultOutput


class ToolApprovalRequest(VercelModel):
    type: Literal["tool-approval-request"]
    approval_id: str = Field(alias="approvalId")
    tool_call_id: str = Field(alias="toolCallId")


class ToolApprovalResponse(VercelModel):
    type: Literal["tool-approval-response"]
    approval_id: str = Field(alias="approvalId")
    approved: bool
    reason: str | None = None


UserPart = Annotated[Union[TextPart, ImagePart, FilePart], Field(discriminator="type")]
AssistantPart = Annotated[
    Union[TextPart, FilePart, ReasoningPart, ToolCallPart, ToolResultPart, ToolApprovalRequest],
    Field(discriminator="type"),
]
ToolPart = Annotated[Union[ToolResultPart, ToolApprovalResponse], Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


class SystemMessage(VercelModel):
    role: Literal["system"]
    content: str


class UserMessage(VercelModel):
    role: Literal["user"]
    content: str | list[UserPart]


class AssistantMessage(VercelModel):
    role: Literal["assistant"]
    content: str | list[AssistantPart]


class ToolMessage(VercelModel):
    role: Literal["tool"]
    content: list[ToolPart]


VercelMessage = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]

MESSAGE_LIST: TypeAdapter[list[VercelMessage]] = TypeAdapter(list[VercelMessage])
