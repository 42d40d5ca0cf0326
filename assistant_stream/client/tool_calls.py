from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any
import asyncio
import inspect
import logging

from assistant_stream.errors import ToolHandlerFailure, UnhandledToolCalls
from assistant_stream.protocol.stream_parts import ToolCall, ToolCallOutput

logger = logging.getLogger(__name__)

ToolCallHandler = Callable[[str, Any], Awaitable[str] | str]


async def _invoke(handler: ToolCallHandler, tool_call: ToolCall) -> ToolCallOutput:
    try:
        output = handler(tool_call.function.name, tool_call.function.arguments)
        if inspect.isawaitable(output):
            output = await output
        if not isinstance(output, str):
            raise TypeError(f"tool handler returned {type(output).__name__}, expected str")
    except Exception as exc:
        logger.warning(
            "tool call handler failed",
            extra={"tool_call_id": tool_call.id, "function_name": tool_call.function.name},
        )
        raise ToolHandlerFailure(tool_call, exc) from exc
    return ToolCallOutput(tool_call_id=tool_call.id, output=output)


async def run_tool_calls(tool_calls: Sequence[ToolCall], handler: ToolCallHandler | None) -> list[ToolCallOutput]:
    """Invoke ``handler`` concurrently for every tool call and collect the outputs.

    Outputs come back in the order of ``tool_calls``. The first failing
    invocation cancels the ones still running and raises ``ToolHandlerFailure``,
    so callers never see a partial result.
    """

    if handler is None:
        raise UnhandledToolCalls([tool_call.function.name for tool_call in tool_calls])

    tasks = [asyncio.ensure_future(_invoke(handler, tool_call)) for tool_call in tool_calls]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise
