from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from assistant_stream.errors import MalformedPart

MessageRole = Literal["user", "assistant", "data", "tool"]

STREAM_PART_SEPARATOR = ":"
STREAM_PART_TERMINATOR = "\n"


class TextContent(BaseModel):
    value: str = Field(..., description="Plain text of an assistant content block")


class ContentBlock(BaseModel):
    text: TextContent | None = Field(default=None, description="Text block; absent for non-text blocks")


class AssistantMessagePayload(BaseModel):
    id: str = Field(..., description="Assistant-side message id")
    role: MessageRole = Field(..., description="Author role of the message")
    content: list[ContentBlock] = Field(default_factory=list, description="Ordered content blocks")

    @property
    def text(self) -> str:
        """Text of the first content block, or an empty string when it carries none."""

        if not self.content or self.content[0].text is None:
            return ""
        return self.content[0].text.value


class DataMessagePayload(BaseModel):
    id: str | None = Field(default=None, description="Optional id of the data message")
    data: Any = Field(default=None, description="Opaque JSON payload forwarded to the client")


class ToolCallFunction(BaseModel):
    name: str = Field(..., description="Name of the capability the client should invoke")
    arguments: Any = Field(default=None, description="Opaque JSON arguments for the capability")


class ToolCall(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Tool-call correlation id")
    function: ToolCallFunction


class ToolCallsPayload(BaseModel):
    tool_calls: list[ToolCall] = Field(..., description="Tool calls the client must answer")


class ControlDataPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    thread_id: str = Field(..., alias="threadId", description="Thread the response belongs to")
    message_id: str = Field(..., alias="messageId", description="Id assigned to the triggering message")


class ToolCallOutput(BaseModel):
    tool_call_id: str = Field(..., description="Id of the tool call this output answers")
    output: str = Field(..., description="String result produced by the tool handler")


class StreamPartType(str, Enum):
    """Wire codes of the stream parts; the value is the line prefix."""

    ASSISTANT_MESSAGE = "assistant_message"
    DATA_MESSAGE = "data_message"
    TOOL_CALLS = "tool_calls"
    ASSISTANT_CONTROL_DATA = "assistant_control_data"
    ERROR = "error"


_PAYLOAD_ADAPTERS: dict[StreamPartType, TypeAdapter[Any]] = {
    StreamPartType.ASSISTANT_MESSAGE: TypeAdapter(AssistantMessagePayload),
    StreamPartType.DATA_MESSAGE: TypeAdapter(DataMessagePayload),
    StreamPartType.TOOL_CALLS: TypeAdapter(ToolCallsPayload),
    StreamPartType.ASSISTANT_CONTROL_DATA: TypeAdapter(ControlDataPayload),
    StreamPartType.ERROR: TypeAdapter(str),
}


@dataclass(frozen=True)
class StreamPart:
    """One decoded event of an assistant response stream."""

    type: StreamPartType
    value: Any


def format_stream_part(part_type: StreamPartType | str, value: Any) -> str:
    """Encode ``value`` as a single newline-terminated stream line.

    ``value`` may be a payload model or its plain JSON shape; it is validated
    against the kind's payload model before serialization.
    """

    part_type = StreamPartType(part_type)
    adapter = _PAYLOAD_ADAPTERS[part_type]
    payload = adapter.validate_python(value)
    # An absent data message id is omitted from the wire rather than sent as null.
    exclude = {"id"} if part_type is StreamPartType.DATA_MESSAGE and payload.id is None else None
    serialized = json.dumps(
        adapter.dump_python(payload, mode="json", by_alias=True, exclude=exclude),
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return f"{part_type.value}{STREAM_PART_SEPARATOR}{serialized}{STREAM_PART_TERMINATOR}"


def parse_stream_part(line: str) -> StreamPart:
    """Decode one stream line (terminator optional) into a typed ``StreamPart``."""

    line = line.removesuffix(STREAM_PART_TERMINATOR)
    code, separator, raw_value = line.partition(STREAM_PART_SEPARATOR)
    if not separator:
        raise MalformedPart(line, "missing type separator")

    try:
        part_type = StreamPartType(code)
    except ValueError as exc:
        raise MalformedPart(line, f"unknown stream part type {code!r}") from exc

    try:
        value = _PAYLOAD_ADAPTERS[part_type].validate_json(raw_value)
    except ValidationError as exc:
        raise MalformedPart(line, f"invalid {part_type.value} payload") from exc

    return StreamPart(type=part_type, value=value)
