from typing import Protocol

from assistant_stream.api.schemas.assistant import AssistantRequest
from assistant_stream.streams.assistant_response import AssistantStream


class AssistantAgent(Protocol):
    """Contract for assistants that answer a request by emitting stream parts."""

    async def respond(self, request: AssistantRequest, stream: AssistantStream) -> None:
        """Emit the assistant's reply for ``request`` through ``stream``."""
