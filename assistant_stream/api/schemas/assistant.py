from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from assistant_stream.protocol.stream_parts import ToolCallOutput


class AssistantRequest(BaseModel):
    """Request body accepted by the assistant endpoint; extra fields pass through."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    thread_id: str | None = Field(
        default=None,
        alias="threadId",
        description="Existing thread id, or null to start a new thread",
    )
    message: str | None = Field(default=None, description="User message text for role=user requests")
    content: list[ToolCallOutput] | None = Field(default=None, description="Tool outputs for role=tool requests")
    data: dict[str, Any] | None = Field(default=None, description="Optional request data supplied by the client")
    role: Literal["user", "tool"] = Field(..., description="Author role of the submitted turn")

    @model_validator(mode="after")
    def _check_role_payload(self) -> "AssistantRequest":
        if self.role == "user" and self.message is None:
            raise ValueError("message is required for role=user requests")
        if self.role == "tool" and self.content is None:
            raise ValueError("content is required for role=tool requests")
        return self
