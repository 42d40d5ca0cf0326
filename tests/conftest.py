"""Shared test utilities and fixtures for assistant-stream tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
import json
from pathlib import Path

import httpx
import pytest

from assistant_stream.client.conversation import AssistantConversation
from assistant_stream.core.settings import Settings
from assistant_stream.protocol.stream_parts import format_stream_part

ASSISTANT_API_URL = "http://assistant.test/api/assistant"


def encode_parts(*parts: tuple[str, object]) -> bytes:
    """Encode ``(type, value)`` pairs into one response body."""

    return "".join(format_stream_part(part_type, value) for part_type, value in parts).encode("utf-8")


def control_data(thread_id: str, message_id: str) -> tuple[str, object]:
    return ("assistant_control_data", {"threadId": thread_id, "messageId": message_id})


def assistant_text(message_id: str, text: str) -> tuple[str, object]:
    return ("assistant_message", {"id": message_id, "role": "assistant", "content": [{"text": {"value": text}}]})


def tool_calls(*calls: tuple[str, str, object]) -> tuple[str, object]:
    return (
        "tool_calls",
        {"tool_calls": [{"id": call_id, "function": {"name": name, "arguments": args}} for call_id, name, args in calls]},
    )


async def iterate_fragments(fragments: list[bytes]) -> AsyncIterator[bytes]:
    for fragment in fragments:
        yield fragment


class ScriptedAssistantEndpoint:
    """Fake assistant endpoint serving queued bodies and recording request payloads."""

    def __init__(self, responses: list[bytes | list[bytes] | httpx.Response]) -> None:
        self._responses = list(responses)
        self.requests: list[dict] = []
        self.headers: list[httpx.Headers] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        self.headers.append(request.headers)
        if not self._responses:
            raise AssertionError("assistant endpoint called more often than scripted")

        response = self._responses.pop(0)
        if isinstance(response, httpx.Response):
            return response
        if isinstance(response, list):
            return httpx.Response(200, content=iterate_fragments(response), headers={"Content-Type": "text/plain; charset=utf-8"})
        return httpx.Response(200, content=response, headers={"Content-Type": "text/plain; charset=utf-8"})


@pytest.fixture
def make_conversation() -> Callable[..., AssistantConversation]:
    def _make(endpoint: ScriptedAssistantEndpoint, **options) -> AssistantConversation:
        client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
        return AssistantConversation(ASSISTANT_API_URL, client=client, **options)

    return _make


@pytest.fixture
def mock_messages_file(tmp_path: Path) -> Path:
    path = tmp_path / "assistant-messages.md"
    path.write_text(
        "First scripted reply.\n"
        "--- message\n"
        "tool_call: get_weather {\"city\": \"Paris\"}\n"
        "tool_call: get_time {}\n"
        "--- message\n"
        "Second scripted reply.\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def test_settings(mock_messages_file: Path) -> Settings:
    return Settings(ASSISTANT_MOCK_MESSAGES_FILE=str(mock_messages_file), APP_ENV="test")
