"""Shared fixtures and fakes for the test suite."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any

import pytest
from google.adk.events.event import Event
from google.adk.events.event_actions import EventActions
from google.adk.flows.llm_flows.functions import REQUEST_CONFIRMATION_FUNCTION_CALL_NAME
from google.genai import types

from hitl_backend.runtime import RunResponse
from hitl_backend.settings import Settings


def user_text(text: str) -> types.Content:
    return types.Content(role="user", parts=[types.Part(text=text)])


def model_event(*parts: types.Part, partial: bool | None = None) -> Event:
    return Event(
        author="WorkflowAssistant",
        invocation_id="inv-1",
        partial=partial,
        content=types.Content(role="model", parts=list(parts)),
    )


def text_part(text: str) -> types.Part:
    return types.Part(text=text)


def confirmation_call(
    approval_id: str, name: str, args: dict[str, Any] | None = None
) -> types.Part:
    """The function call ADK emits when a tool needs confirmation."""
    return types.Part(
        function_call=types.FunctionCall(
            id=approval_id,
            name=REQUEST_CONFIRMATION_FUNCTION_CALL_NAME,
            args={
                "originalFunctionCall": {"id": "orig-1", "name": name, "args": args or {}},
                "toolConfirmation": {"hint": "", "confirmed": False},
            },
        )
    )


class FakeStreamAgent:
    """AgentStreamPort that replays a fixed list of events and records its input."""

    def __init__(self, events: list[Event] | None = None, error: Exception | None = None) -> None:
        self.events = events or []
        self.error = error
        self.calls: list[tuple[list[types.Content], str]] = []

    async def run_stream(
        self, messages: Sequence[types.Content], *, session_id: str
    ) -> AsyncIterator[Event]:
        self.calls.append((list(messages), session_id))
        for event in self.events:
            yield event
        if self.error is not None:
            raise self.error


class FakeTextAgent:
    """TextAgent returning canned replies in order (the last one repeats)."""

    def __init__(self, *replies: str) -> None:
        self.replies = list(replies) or [""]
        self.prompts: list[str] = []
        self.session_ids: list[str | None] = []

    async def run(self, prompt: str, *, session_id: str | None = None) -> str:
        self.prompts.append(prompt)
        self.session_ids.append(session_id)
        index = min(len(self.prompts) - 1, len(self.replies) - 1)
        return self.replies[index]


def authored_event(
    author: str,
    text: str | None = None,
    *,
    transfer_to: str | None = None,
    partial: bool | None = None,
) -> Event:
    """An event from one agent of a multi-agent run."""
    return Event(
        author=author,
        invocation_id="inv-1",
        partial=partial,
        content=types.Content(role="model", parts=[types.Part(text=text)]) if text else None,
        actions=EventActions(transfer_to_agent=transfer_to),
    )


class FakeResponseAgent:
    """ResponseAgent returning scripted runs in order (the last one repeats)."""

    def __init__(self, *runs: list[Event]) -> None:
        self.runs = list(runs) or [[]]
        self.prompts: list[str] = []
        self.session_ids: list[str | None] = []

    async def run_response(self, prompt: str, *, session_id: str | None = None) -> RunResponse:
        self.prompts.append(prompt)
        self.session_ids.append(session_id)
        index = min(len(self.prompts) - 1, len(self.runs) - 1)
        return RunResponse(events=list(self.runs[index]))


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, llm_model="test-model", adk_app_name="test_app")
