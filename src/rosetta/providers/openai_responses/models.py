"""OpenAI Responses API item schema (input and output items)."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class ResponsesModel(BaseModel):
    model_config = ConfigDict(extra="allow")


# ---------------------------------------------------------------------------
# Message content
# ---------------------------------------------------------------------------


class TextPart(ResponsesModel):
    type: Literal["input_text", "output_text"]
    text: str


class ImagePart(ResponsesModel):
    type: Literal["input_image"]
    detail: Literal["low", "high", "auto"]
    file_id: str | None = None
    image_url: str | None = None


class FilePart(ResponsesModel):
    type: Literal["input_file"]
    file_data: str | None = None
    file_id: str | None = None


class AudioPart(ResponsesModel):
    type: Literal["input_audio"]
    data: str
    format: Literal["mp3", "wav"]


class RefusalPart(ResponsesModel):
    type: Literal["refusal"]
    refusal: str


ContentPart = Annotated[
    Union[TextPart, ImagePart, FilePart, AudioPart, RefusalPart],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class MessageItem(ResponsesModel):
    type: Literal["message"] | None = None
    role: Literal["user", "assistant", "system", "developer"]
    content: str | list[ContentPart]


class FunctionCallItem(ResponsesModel):
    type: Literal["function_call"]
    call_id: str
    name: str
    arguments: str


class FunctionCallOutputItem(ResponsesModel):
    type: Literal["function_call_output"]
    call_id: str
    output: str


class ReasoningSummary(ResponsesModel):
    type: Literal["summary_text"]
    text: str


class ReasoningItem(ResponsesModel):
    type: Literal["reasoning"]
    summary: list[ReasoningSummary]


class GenericItem(ResponsesModel):
    """Any other item type (web search calls, computer calls, ...)."""

    type: str

    @field_validator("type")
    @classmethod
    def _not_a_message(cls, value: str) -> str:
        if value == "message":
            raise ValueError("message items must match the message schema")
        return value


# Tried in order; anything with a ``type`` that fails the specific shapes
# lands in GenericItem.
ResponsesItem = Annotated[
    Union[MessageItem, FunctionCallItem, FunctionCallOutputItem, ReasoningItem, GenericItem],
    Field(union_mode="left_to_right"),
]

MESSAGE_LIST: TypeAdapter[list[ResponsesItem]] = TypeAdapter(list[ResponsesItem])
