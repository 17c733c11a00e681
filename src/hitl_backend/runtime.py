"""
ADK runner wrappers used by the HTTP layer and the triage workflows.
"""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field

from google.adk.agents import BaseAgent
from google.adk.agents.run_config import RunConfig, StreamingMode
from google.adk.events.event import Event
from google.adk.flows.llm_flows.functions import REQUEST_CONFIRMATION_FUNCTION_CALL_NAME
from google.adk.runners import Runner
from google.adk.sessions.base_session_service import BaseSessionService
from google.adk.sessions.in_memory_session_service import InMemorySessionService
from google.genai import types

from .adapters.client_to_adk import build_user_content
from .logging import get_logger

logger = get_logger(__name__)


@dataclass
class RunResponse:
    """Every fragment of one agent run, in arrival order."""

    events: list[Event] = field(default_factory=list)

    @property
    def messages(self) -> list[types.Content]:
        return [event.content for event in self.events if event.content is not None]

    @property
    def text(self) -> str:
        # Partial events are previews of the final aggregated event.
        chunks: list[str] = []
        for event in self.events:
            if event.partial or event.content is None:
                continue
            for part in event.content.parts or []:
                if part.text and not part.thought:
                    chunks.append(part.text)
        return "".join(chunks)


async def collect_response(stream: AsyncIterator[Event]) -> RunResponse:
    response = RunResponse()
    async for event in stream:
        response.events.append(event)
    return response


async def ensure_session(runner: Runner, *, user_id: str, session_id: str) -> None:
    session = await runner.session_service.get_session(
        app_name=runner.app_name,
        user_id=user_id,
        session_id=session_id,
    )
    if session is not None:
        return
    await runner.session_service.create_session(
        app_name=runner.app_name,
        user_id=user_id,
        session_id=session_id,
    )


class AdkStreamingAgent:
    """Streams ADK events for a client conversation.

    The client resends the whole conversation every turn while ADK keeps its
    own copy in the session, so only the user contents after the last model
    turn are forwarded, merged into one message. Confirmation responses go
    back to the invocation that paused for them.
    """

    def __init__(self, runner: Runner, *, user_id: str, streaming: bool = True) -> None:
        self.runner = runner
        self.user_id = user_id
        self.streaming = streaming
        # (session_id, confirmation call id) -> invocation waiting on it
        self._paused: dict[tuple[str, str], str] = {}

    async def run_stream(
        self, messages: Sequence[types.Content], *, session_id: str
    ) -> AsyncIterator[Event]:
        new_message = trailing_user_content(messages)
        if new_message is None:
            logger.info("no_user_message", session_id=session_id)
            return

        await ensure_session(self.runner, user_id=self.user_id, session_id=session_id)
        run_config = RunConfig(
            streaming_mode=StreamingMode.SSE if self.streaming else StreamingMode.NONE
        )
        for invocation_id, parts in self._group_by_invocation(session_id, new_message):
            async for event in self.runner.run_async(
                user_id=self.user_id,
                session_id=session_id,
                invocation_id=invocation_id,
                new_message=types.Content(role="user", parts=parts),
                run_config=run_config,
            ):
                self._track_confirmations(session_id, event)
                yield event

    def _group_by_invocation(
        self, session_id: str, message: types.Content
    ) -> list[tuple[str | None, list[types.Part]]]:
        groups: dict[str | None, list[types.Part]] = {}
        for part in message.parts or []:
            response = part.function_response
            invocation_id = None
            if response is not None and response.id:
                invocation_id = self._paused.pop((session_id, response.id), None)
            groups.setdefault(invocation_id, []).append(part)

        # Resume paused invocations first; anything else starts a new one.
        fresh = groups.pop(None, None)
        ordered = list(groups.items())
        if fresh:
            ordered.append((None, fresh))
        return ordered

    def _track_confirmations(self, session_id: str, event: Event) -> None:
        if event.partial or not event.invocation_id:
            return
        for call in event.get_function_calls():
            if call.name == REQUEST_CONFIRMATION_FUNCTION_CALL_NAME and call.id:
                self._paused[(session_id, call.id)] = event.invocation_id


def trailing_user_content(messages: Sequence[types.Content]) -> types.Content | None:
    """Merge the user contents after the last model turn into one message."""
    parts: list[types.Part] = []
    for message in reversed(messages):
        if message.role != "user":
            break
        parts[:0] = message.parts or []
    if not parts:
        return None
    return types.Content(role="user", parts=parts)


class AdkTextAgent:
    """Runs one prompt through an ADK agent and returns the final text."""

    def __init__(
        self,
        agent: BaseAgent,
        *,
        app_name: str,
        user_id: str,
        session_service: BaseSessionService | None = None,
    ) -> None:
        self.name = agent.name
        self.user_id = user_id
        self.runner = Runner(
            app_name=app_name,
            agent=agent,
            session_service=session_service or InMemorySessionService(),
        )

    async def run(self, prompt: str, *, session_id: str | None = None) -> str:
        response = await self.run_response(prompt, session_id=session_id)
        return response.text

    async def run_response(self, prompt: str, *, session_id: str | None = None) -> RunResponse:
        """Like ``run`` but keeps every event, so callers can see which sub-agent spoke."""
        session_id = session_id or uuid.uuid4().hex
        await ensure_session(self.runner, user_id=self.user_id, session_id=session_id)
        return await collect_response(
            self.runner.run_async(
                user_id=self.user_id,
                session_id=session_id,
                new_message=build_user_content(prompt),
            )
        )
