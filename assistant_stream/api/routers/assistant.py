import logging
import uuid

import punq
from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from assistant_stream.agents.base import AssistantAgent
from assistant_stream.api.schemas.assistant import AssistantRequest
from assistant_stream.dependency_injection.container import get_container
from assistant_stream.streams.assistant_response import AssistantStream, assistant_response

logger = logging.getLogger(__name__)
router = APIRouter(tags=["assistant"])


@router.post(
    "/assistant",
    summary="Stream an assistant response for a user message or submitted tool outputs",
    description="Responds with a line-framed text stream whose first part is the thread/message control data.",
)
async def assistant(
    payload: AssistantRequest,
    container: punq.Container = Depends(get_container),
) -> StreamingResponse:
    agent: AssistantAgent = container.resolve(AssistantAgent)
    thread_id = payload.thread_id or str(uuid.uuid4())
    message_id = str(uuid.uuid4())
    logger.info(
        "assistant request",
        extra={"thread_id": thread_id, "message_id": message_id, "role": payload.role},
    )

    async def process(stream: AssistantStream) -> None:
        await agent.respond(payload, stream)

    return assistant_response(thread_id=thread_id, message_id=message_id, process=process)
