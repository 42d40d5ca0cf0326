from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from typing import Any, Literal
import json
import logging
import uuid

import httpx
from pydantic import BaseModel, Field, TypeAdapter

from assistant_stream.client.tool_calls import ToolCallHandler, run_tool_calls
from assistant_stream.core.settings import Settings, get_settings
from assistant_stream.errors import (
    AssistantStreamError,
    EmptyResponseBody,
    UnexpectedResponseStatus,
    UpstreamError,
)
from assistant_stream.protocol.read_data_stream import read_data_stream
from assistant_stream.protocol.stream_parts import (
    AssistantMessagePayload,
    ControlDataPayload,
    DataMessagePayload,
    MessageRole,
    StreamPart,
    StreamPartType,
    ToolCall,
    ToolCallOutput,
    ToolCallsPayload,
)

logger = logging.getLogger(__name__)

AssistantStatus = Literal["awaiting_message", "in_progress"]
ConversationListener = Callable[[str], None]

_TOOL_OUTPUTS_ADAPTER = TypeAdapter(list[ToolCallOutput])


class Message(BaseModel):
    id: str = Field(default="", description="Message id; empty until back-filled by control data")
    role: MessageRole
    content: str = ""
    data: Any = None
    tool_calls: list[ToolCall] | None = None


class AssistantConversation:
    """Client-side state machine for one assistant thread.

    Each submit issues a request to the assistant endpoint and folds the
    streamed response into ``messages``, ``thread_id`` and ``error``. Tool
    calls requested by the assistant are answered through ``on_tool_call``
    and submitted back on the same thread.
    """

    def __init__(
        self,
        api_url: str,
        *,
        thread_id: str | None = None,
        headers: Mapping[str, str] | None = None,
        body: Mapping[str, Any] | None = None,
        on_tool_call: ToolCallHandler | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 60.0,
    ) -> None:
        self._api_url = api_url
        self._thread_id_param = thread_id
        self._headers = dict(headers or {})
        self._body = dict(body or {})
        self._on_tool_call = on_tool_call
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

        self._messages: list[Message] = []
        self._thread_id: str | None = None
        self._status: AssistantStatus = "awaiting_message"
        self._error: BaseException | None = None
        self._input = ""
        self._listeners: list[ConversationListener] = []

    async def __aenter__(self) -> AssistantConversation:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def thread_id(self) -> str | None:
        return self._thread_id

    @property
    def status(self) -> AssistantStatus:
        return self._status

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def input(self) -> str:
        return self._input

    @input.setter
    def input(self, value: str) -> None:
        self._input = value
        self._notify("input")

    def subscribe(self, listener: ConversationListener) -> Callable[[], None]:
        """Register ``listener`` for state changes; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def submit_message(self, text: str | None = None, data: Mapping[str, Any] | None = None) -> None:
        """Send a user message (the input buffer when ``text`` is omitted)."""

        content = self._input if text is None else text
        if content == "":
            return

        self._set_status("in_progress")
        try:
            self._append_message(Message(role="user", content=content, data=data))
            self.input = ""
            await self._round_trip(
                {
                    **self._body,
                    "threadId": self._request_thread_id(),
                    "message": content,
                    "data": data,
                    "role": "user",
                }
            )
        finally:
            self._set_status("awaiting_message")

    async def submit_tool_output(
        self,
        outputs: Sequence[ToolCallOutput | Mapping[str, Any]],
        data: Mapping[str, Any] | None = None,
    ) -> None:
        """Send tool outputs for the current thread; the input buffer is left alone."""

        tool_outputs = _TOOL_OUTPUTS_ADAPTER.validate_python(list(outputs))
        payload = _TOOL_OUTPUTS_ADAPTER.dump_python(tool_outputs, mode="json")

        self._set_status("in_progress")
        try:
            self._append_message(
                Message(id=str(uuid.uuid4()), role="tool", content=json.dumps(payload, separators=(",", ":")), data=data)
            )
            await self._round_trip(
                {
                    **self._body,
                    "threadId": self._request_thread_id(),
                    "content": payload,
                    "data": data,
                    "role": "tool",
                }
            )
        finally:
            self._set_status("awaiting_message")

    def _request_thread_id(self) -> str | None:
        # A caller-provided thread id always wins over the one bound from the stream.
        if self._thread_id_param is not None:
            return self._thread_id_param
        return self._thread_id

    async def _round_trip(self, body: dict[str, Any]) -> None:
        logger.debug("submitting assistant request", extra={"role": body["role"], "thread_id": body["threadId"]})
        async with self._client.stream("POST", self._api_url, json=body, headers=self._headers) as response:
            await self._handle_response(response)

    async def _handle_response(self, response: httpx.Response) -> None:
        if response.status_code != 200:
            logger.warning("assistant endpoint returned unexpected status", extra={"status_code": response.status_code})
            self._set_error(UnexpectedResponseStatus(response.status_code))
            return

        fragments = response.aiter_bytes()
        try:
            first_fragment = await _first_fragment(fragments)
        except Exception as exc:
            logger.warning("assistant response stream failed before the first fragment", exc_info=True)
            self._set_error(exc)
            return
        if first_fragment is None:
            raise EmptyResponseBody()

        try:
            async for part in read_data_stream(_prepend(first_fragment, fragments)):
                await self._apply_part(part)
        except Exception as exc:
            logger.warning("assistant response stream failed", exc_info=True)
            self._set_error(exc)

    async def _apply_part(self, part: StreamPart) -> None:
        logger.debug("applying stream part", extra={"part_type": part.type.value})

        if part.type is StreamPartType.ASSISTANT_MESSAGE:
            message: AssistantMessagePayload = part.value
            self._append_message(Message(id=message.id, role=message.role, content=message.text))
        elif part.type is StreamPartType.DATA_MESSAGE:
            data_message: DataMessagePayload = part.value
            self._append_message(Message(id=data_message.id or "", role="data", data=data_message.data))
        elif part.type is StreamPartType.TOOL_CALLS:
            tool_calls: ToolCallsPayload = part.value
            self._append_message(Message(role="tool", tool_calls=list(tool_calls.tool_calls)))
            await self._handle_tool_calls(tool_calls.tool_calls)
        elif part.type is StreamPartType.ASSISTANT_CONTROL_DATA:
            control: ControlDataPayload = part.value
            self._bind_control_data(control)
        elif part.type is StreamPartType.ERROR:
            self._set_error(UpstreamError(part.value))
        else:
            raise AssertionError(f"unhandled stream part type {part.type!r}")

    async def _handle_tool_calls(self, tool_calls: Sequence[ToolCall]) -> None:
        try:
            outputs = await run_tool_calls(tool_calls, self._on_tool_call)
        except AssistantStreamError as exc:
            self._set_error(exc)
            return

        try:
            await self.submit_tool_output(outputs)
        except Exception as exc:
            logger.warning("tool output submission failed", exc_info=True)
            self._set_error(exc)

    def _bind_control_data(self, control: ControlDataPayload) -> None:
        self._thread_id = control.thread_id
        self._notify("thread_id")

        if not self._messages:
            logger.debug("control data received before any message", extra={"message_id": control.message_id})
            return
        self._messages[-1].id = control.message_id
        self._notify("messages")

    def _append_message(self, message: Message) -> None:
        self._messages.append(message)
        self._notify("messages")

    def _set_status(self, status: AssistantStatus) -> None:
        self._status = status
        self._notify("status")

    def _set_error(self, error: BaseException) -> None:
        self._error = error
        self._notify("error")

    def _notify(self, field: str) -> None:
        for listener in list(self._listeners):
            listener(field)


async def _first_fragment(fragments: AsyncIterator[bytes]) -> bytes | None:
    async for fragment in fragments:
        if fragment:
            return fragment
    return None


async def _prepend(first: bytes, rest: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    yield first
    async for fragment in rest:
        yield fragment


def create_conversation(settings: Settings | None = None, **options: Any) -> AssistantConversation:
    """Build a conversation against the configured assistant endpoint."""

    settings = settings or get_settings()
    options.setdefault("timeout_seconds", settings.assistant_request_timeout_seconds)
    return AssistantConversation(settings.assistant_api_url, **options)
