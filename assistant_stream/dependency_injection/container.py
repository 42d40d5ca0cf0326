from __future__ import annotations

import punq
from fastapi import Request

from assistant_stream.agents.base import AssistantAgent
from assistant_stream.agents.mock_assistant import MockAssistantAgent
from assistant_stream.core.settings import Settings


def build_container(settings: Settings, agent: AssistantAgent | None = None) -> punq.Container:
    container = punq.Container()
    container.register(Settings, instance=settings)
    if agent is not None:
        container.register(AssistantAgent, instance=agent)
    else:
        container.register(
            AssistantAgent,
            factory=lambda: MockAssistantAgent(settings.assistant_mock_messages_file),
            scope=punq.Scope.singleton,
        )
    return container


def get_container(request: Request) -> punq.Container:
    return request.app.state.container
