"""End-to-end tests driving the conversation client against the FastAPI app."""

from __future__ import annotations

import httpx
import pytest

from assistant_stream.api.schemas.assistant import AssistantRequest
from assistant_stream.client.conversation import AssistantConversation
from assistant_stream.errors import UpstreamError
from assistant_stream.main import create_app
from assistant_stream.streams.assistant_response import AssistantStream

BASE_URL = "http://assistant.test"


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL)


@pytest.mark.asyncio
async def test_healthz_returns_ok(test_settings) -> None:
    async with _client(create_app(test_settings)) as client:
        response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "stream_part_types": ["assistant_message", "data_message", "tool_calls", "assistant_control_data", "error"],
    }


@pytest.mark.asyncio
async def test_assistant_endpoint_streams_control_data_first(test_settings) -> None:
    async with _client(create_app(test_settings)) as client:
        response = await client.post("/api/assistant", json={"threadId": None, "message": "hi", "role": "user"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    lines = response.text.splitlines()
    assert lines[0].startswith("assistant_control_data:")
    assert lines[1].startswith("assistant_message:")
    assert "First scripted reply." in lines[1]


@pytest.mark.asyncio
async def test_assistant_endpoint_keeps_requested_thread_id(test_settings) -> None:
    async with _client(create_app(test_settings)) as client:
        response = await client.post("/api/assistant", json={"threadId": "thread-7", "message": "hi", "role": "user"})

    assert response.text.startswith('assistant_control_data:{"threadId":"thread-7",')


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"threadId": None, "role": "user"},
        {"threadId": None, "role": "tool"},
        {"threadId": None, "message": "hi", "role": "system"},
    ],
)
async def test_assistant_endpoint_rejects_incomplete_requests(test_settings, payload) -> None:
    async with _client(create_app(test_settings)) as client:
        response = await client.post("/api/assistant", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_conversation_round_trip_with_tool_calls_against_mock_assistant(test_settings) -> None:
    invoked: list[tuple[str, object]] = []

    async def on_tool_call(name: str, arguments: object) -> str:
        invoked.append((name, arguments))
        return f"{name} done"

    async with _client(create_app(test_settings)) as client:
        conversation = AssistantConversation(f"{BASE_URL}/api/assistant", client=client, on_tool_call=on_tool_call)
        await conversation.submit_message("first")
        first_thread = conversation.thread_id
        await conversation.submit_message("second")

    assert conversation.error is None
    assert conversation.thread_id == first_thread
    assert sorted(invoked, key=lambda item: item[0]) == [("get_time", {}), ("get_weather", {"city": "Paris"})]
    assert [m.role for m in conversation.messages] == ["user", "assistant", "user", "tool", "tool", "assistant"]
    assert conversation.messages[-1].content.startswith("Tool results received.")
    assert "get_weather done" in conversation.messages[-1].content
    assert all(m.id for m in conversation.messages if m.role != "tool" or m.tool_calls is None)


@pytest.mark.asyncio
async def test_agent_failure_reaches_the_client_as_upstream_error(test_settings) -> None:
    class FailingAgent:
        async def respond(self, request: AssistantRequest, stream: AssistantStream) -> None:
            stream.send_data_message({"data": {"progress": "started"}})
            raise RuntimeError("model unavailable")

    async with _client(create_app(test_settings, agent=FailingAgent())) as client:
        conversation = AssistantConversation(f"{BASE_URL}/api/assistant", client=client)
        await conversation.submit_message("hello")

    assert isinstance(conversation.error, UpstreamError)
    assert conversation.error.message == "model unavailable"
    assert [m.role for m in conversation.messages] == ["user", "data"]
    assert conversation.status == "awaiting_message"
