"""Failure taxonomy for assistant response streams.

Only ``EmptyResponseBody`` is raised out of the public submit operations of
``AssistantConversation``; every other error is recorded in the conversation's
``error`` slot so callers can inspect it after the round trip finished.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from assistant_stream.protocol.stream_parts import ToolCall


class AssistantStreamError(Exception):
    """Base class for all assistant stream failures."""


class EmptyResponseBody(AssistantStreamError):
    """The assistant endpoint answered without any response body."""

    def __init__(self) -> None:
        super().__init__("The response body is empty.")


class UnexpectedResponseStatus(AssistantStreamError):
    """The assistant endpoint answered with a non-200 status code."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Assistant endpoint responded with status {status_code}")


class MalformedPart(AssistantStreamError):
    """A stream line could not be decoded into a typed stream part."""

    def __init__(self, line: str, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed stream part ({reason}): {line[:200]!r}")


class UnhandledToolCalls(AssistantStreamError):
    """The assistant requested tool calls but no tool handler is configured."""

    def __init__(self, function_names: Sequence[str]) -> None:
        self.function_names = list(function_names)
        super().__init__(
            "No tool call handler is configured for this assistant. "
            f"Tool call names invoked: {', '.join(self.function_names)}"
        )


class ToolHandlerFailure(AssistantStreamError):
    """A tool handler invocation failed, so no outputs were submitted."""

    def __init__(self, tool_call: ToolCall, cause: BaseException) -> None:
        self.tool_call = tool_call
        self.cause = cause
        super().__init__(f"Tool call {tool_call.id} ({tool_call.function.name}) failed: {cause}")


class UpstreamError(AssistantStreamError):
    """The producer sent an explicit ``error`` stream part."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)
