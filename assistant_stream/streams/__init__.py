from assistant_stream.streams.assistant_response import (
    AssistantResponseCallback,
    AssistantStream,
    assistant_response,
    stream_assistant_response,
)

__all__ = ["AssistantResponseCallback", "AssistantStream", "assistant_response", "stream_assistant_response"]
