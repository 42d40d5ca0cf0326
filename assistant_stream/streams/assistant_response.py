from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any
import asyncio
import logging

from fastapi.responses import StreamingResponse

from assistant_stream.protocol.stream_parts import (
    AssistantMessagePayload,
    DataMessagePayload,
    StreamPartType,
    ToolCallsPayload,
    format_stream_part,
)

logger = logging.getLogger(__name__)

_SENTINEL = object()


class AssistantStream:
    """Handle given to a response callback for emitting typed stream parts."""

    def __init__(self, thread_id: str, message_id: str, queue: asyncio.Queue[str | object]) -> None:
        self.thread_id = thread_id
        self.message_id = message_id
        self._queue = queue
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send_message(self, message: AssistantMessagePayload | dict[str, Any]) -> None:
        self._send(StreamPartType.ASSISTANT_MESSAGE, message)

    def send_data_message(self, message: DataMessagePayload | dict[str, Any]) -> None:
        self._send(StreamPartType.DATA_MESSAGE, message)

    def send_tool_call_message(self, message: ToolCallsPayload | dict[str, Any]) -> None:
        self._send(StreamPartType.TOOL_CALLS, message)

    def send_error(self, error_message: str) -> None:
        self._send(StreamPartType.ERROR, error_message)

    def send_control_data(self) -> None:
        self._send(
            StreamPartType.ASSISTANT_CONTROL_DATA,
            {"threadId": self.thread_id, "messageId": self.message_id},
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_SENTINEL)

    def _send(self, part_type: StreamPartType, value: Any) -> None:
        if self._closed:
            raise RuntimeError(f"Cannot send {part_type.value} part: assistant stream is closed")
        self._queue.put_nowait(format_stream_part(part_type, value))


AssistantResponseCallback = Callable[[AssistantStream], Awaitable[None]]


async def _run_callback(stream: AssistantStream, process: AssistantResponseCallback) -> None:
    try:
        await process(stream)
    except Exception as exc:
        logger.exception(
            "assistant response callback failed",
            extra={"thread_id": stream.thread_id, "message_id": stream.message_id},
        )
        if not stream.closed:
            stream.send_error(str(exc) or exc.__class__.__name__)
    finally:
        stream.close()


async def stream_assistant_response(
    thread_id: str,
    message_id: str,
    process: AssistantResponseCallback,
) -> AsyncIterator[bytes]:
    """Run ``process`` and yield the encoded stream lines it produces.

    The control-data part is always the first line. The stream closes exactly
    once after the callback finished, whether it succeeded, failed or sent
    nothing; a failure is reported as a trailing ``error`` part.
    """

    queue: asyncio.Queue[str | object] = asyncio.Queue()
    stream = AssistantStream(thread_id=thread_id, message_id=message_id, queue=queue)
    stream.send_control_data()
    task = asyncio.create_task(_run_callback(stream, process))

    try:
        while True:
            item = await queue.get()
            if item is _SENTINEL:
                return
            yield item.encode("utf-8")
    finally:
        if not task.done():
            # The consumer went away before the callback finished.
            task.cancel()


def assistant_response(thread_id: str, message_id: str, process: AssistantResponseCallback) -> StreamingResponse:
    return StreamingResponse(
        stream_assistant_response(thread_id, message_id, process),
        status_code=200,
        media_type="text/plain; charset=utf-8",
    )
