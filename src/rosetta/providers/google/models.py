"""Google Gemini ``GenerateContent`` schema (``Content`` and ``Part``)."""

from __future__ import annotations

from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

PART_DATA_FIELDS: tuple[str, ...] = (
    "text",
    "inline_data",
    "file_data",
    "function_call",
    "function_response",
    "executable_code",
    "code_execution_result",
)


class GoogleModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Blob(GoogleModel):
    mime_type: str | None = Field(default=None, alias="mimeType")
    data: str | None = None


class FileData(GoogleModel):
    mime_type: str | None = Field(default=None, alias="mimeType")
    file_uri: str | None = Field(default=None, alias="fileUri")


class FunctionCall(GoogleModel):
    id: str | None = None
    name: str | None = None
    args: dict[str, Any] | None = None


class FunctionResponse(GoogleModel):
    id: str | None = None
    name: str | None = None
    response: Any = None


class ExecutableCode(GoogleModel):
    code: str | None = None
    language: str | None = None


class CodeExecutionResult(GoogleModel):
    outcome: str | None = None
    output: str | None = None


class Part(GoogleModel):
    """A single part; exactly one data field is expected to be set."""

    text: str | None = None
    thought: bool | None = None
    thought_signature: str | None = Field(default=None, alias="thoughtSignature")
    inline_data: Blob | None = Field(default=None, alias="inlineData")
    file_data: FileData | None = Field(default=None, alias="fileData")
    function_call: FunctionCall | None = Field(default=None, alias="functionCall")
    function_response: FunctionResponse | None = Field(default=None, alias="functionResponse")
    executable_code: ExecutableCode | None = Field(default=None, alias="executableCode")
    code_execution_result: CodeExecutionResult | None = Field(default=None, alias="codeExecutionResult")

    @model_validator(mode="after")
    def _require_data(self) -> Part:
        if all(getattr(self, name) is None for name in PART_DATA_FIELDS):
            raise ValueError("part carries none of the Gemini data fields")
        return self


class Content(GoogleModel):
    role: str | None = None
    parts: list[Part]


GoogleSystem = Annotated[Union[str, Content, list[Part], Part], Field(union_mode="left_to_right")]

MESSAGE_LIST: TypeAdapter[list[Content]] = TypeAdapter(list[Content])
SYSTEM: TypeAdapter[GoogleSystem] = TypeAdapter(GoogleSystem)
