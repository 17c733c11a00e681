"""
Agent wrapper that exposes ADK tool confirmations as `request_approval` tool calls.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence

from google.adk.events.event import Event
from google.genai import types

from .adapters.approval_translator import (
    translate_incoming_messages,
    translate_outgoing_event,
)
from .ports import AgentStreamPort
from .runtime import RunResponse, collect_response


class ServerFunctionApprovalAgent:
    """Delegating agent that handles function approvals on the server side.

    Incoming client history is translated once before the inner agent runs, so
    a malformed approval never reaches it. Outgoing events are translated one
    by one as they arrive.
    """

    def __init__(self, inner: AgentStreamPort) -> None:
        self.inner = inner

    async def run_stream(
        self, messages: Sequence[types.Content], *, session_id: str
    ) -> AsyncIterator[Event]:
        processed = translate_incoming_messages(messages)
        stream = self.inner.run_stream(processed, session_id=session_id)
        try:
            async for event in stream:
                yield translate_outgoing_event(event)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

    async def run(
        self, messages: Sequence[types.Content], *, session_id: str
    ) -> RunResponse:
        return await collect_response(self.run_stream(messages, session_id=session_id))
