from assistant_stream.client.conversation import AssistantConversation, Message, create_conversation
from assistant_stream.client.tool_calls import ToolCallHandler, run_tool_calls

__all__ = ["AssistantConversation", "Message", "ToolCallHandler", "create_conversation", "run_tool_calls"]
