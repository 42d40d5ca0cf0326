from __future__ import annotations

import json
import logging
from pathlib import Path
import uuid

from assistant_stream.agents.base import AssistantAgent
from assistant_stream.api.schemas.assistant import AssistantRequest
from assistant_stream.protocol.stream_parts import ToolCall, ToolCallFunction
from assistant_stream.streams.assistant_response import AssistantStream

logger = logging.getLogger(__name__)


class MockAssistantAgent(AssistantAgent):
    """File-driven mock assistant that cycles through predefined replies.

    A reply made only of ``tool_call: <name> <json-args>`` lines is sent as a
    ``tool_calls`` part; tool outputs submitted back are acknowledged with a
    summary message.
    """

    _delimiter = "\n--- message\n"
    _tool_call_prefix = "tool_call:"

    def __init__(self, messages_file: str) -> None:
        path = Path(messages_file)
        raw_content = path.read_text(encoding="utf-8")
        parsed_messages = [chunk.strip() for chunk in raw_content.split(self._delimiter)]
        self._messages = [message for message in parsed_messages if message]
        if not self._messages:
            raise ValueError(
                f"No mock messages found in {path}. Use delimiter {self._delimiter!r} between messages."
            )
        self._next_index = 0
        logger.info("loaded mock assistant messages", extra={"messages_count": len(self._messages)})

    async def respond(self, request: AssistantRequest, stream: AssistantStream) -> None:
        if request.role == "tool":
            outputs = request.content or []
            summary = "; ".join(f"{output.tool_call_id}: {output.output}" for output in outputs)
            self._send_text(stream, f"Tool results received. {summary}".strip())
            return

        logger.debug("serving mock assistant response", extra={"message_length": len(request.message or "")})
        response = self._messages[self._next_index]
        self._next_index = (self._next_index + 1) % len(self._messages)

        tool_calls = self._parse_tool_calls(response)
        if tool_calls:
            stream.send_tool_call_message({"tool_calls": tool_calls})
        else:
            self._send_text(stream, response)

    @staticmethod
    def _send_text(stream: AssistantStream, text: str) -> None:
        stream.send_message(
            {
                "id": f"msg_{uuid.uuid4().hex}",
                "role": "assistant",
                "content": [{"text": {"value": text}}],
            }
        )

    def _parse_tool_calls(self, response: str) -> list[ToolCall]:
        lines = [line.strip() for line in response.splitlines() if line.strip()]
        if not lines or not all(line.startswith(self._tool_call_prefix) for line in lines):
            return []

        tool_calls: list[ToolCall] = []
        for line in lines:
            name, _, raw_arguments = line.removeprefix(self._tool_call_prefix).strip().partition(" ")
            arguments = json.loads(raw_arguments) if raw_arguments.strip() else {}
            tool_calls.append(
                ToolCall(id=f"call_{uuid.uuid4().hex}", function=ToolCallFunction(name=name, arguments=arguments))
            )
        return tool_calls
