"""Tests for the ADK runner wrappers and the workflow assistant wiring."""

from __future__ import annotations

import json
from typing import Any

import pytest
from google.adk.agents.run_config import StreamingMode
from google.adk.apps.app import App
from google.adk.flows.llm_flows.functions import REQUEST_CONFIRMATION_FUNCTION_CALL_NAME
from google.genai import types

from conftest import confirmation_call, model_event, text_part, user_text
from hitl_backend.adapters.client_to_adk import to_adk_contents
from hitl_backend.agents import workflow_assistant
from hitl_backend.approval_agent import ServerFunctionApprovalAgent
from hitl_backend.runtime import (
    AdkStreamingAgent,
    RunResponse,
    collect_response,
    trailing_user_content,
)
from hitl_backend.settings import Settings
from hitl_backend.tools import execute_command


async def replay(*events):
    for event in events:
        yield event


class FakeSessionService:
    def __init__(self) -> None:
        self.created: list[str] = []

    async def get_session(self, *, app_name: str, user_id: str, session_id: str) -> Any:
        return object() if session_id in self.created else None

    async def create_session(self, *, app_name: str, user_id: str, session_id: str) -> None:
        self.created.append(session_id)


class RecordingRunner:
    """Stands in for an ADK Runner: records each run and replays scripted events."""

    def __init__(self, *turns: list) -> None:
        self.app_name = "test_app"
        self.session_service = FakeSessionService()
        self.turns = list(turns)
        self.calls: list[dict[str, Any]] = []

    async def run_async(self, **kwargs: Any):
        self.calls.append(kwargs)
        events = self.turns.pop(0) if self.turns else []
        for event in events:
            yield event


def response_ids(message: types.Content) -> list[str]:
    return [part.function_response.id for part in message.parts if part.function_response]


async def drain(agent, messages, session_id: str = "t-1") -> list:
    return [event async for event in agent.run_stream(messages, session_id=session_id)]


class TestRunResponse:
    @pytest.mark.asyncio
    async def test_collects_events_in_order(self) -> None:
        events = [model_event(text_part("a")), model_event(text_part("b"))]

        response = await collect_response(replay(*events))

        assert response.events == events
        assert [m.parts[0].text for m in response.messages] == ["a", "b"]
        assert response.text == "ab"

    def test_empty(self) -> None:
        assert RunResponse().text == ""
        assert RunResponse().messages == []


class TestTrailingUserContent:
    def test_merges_user_contents_after_last_model_turn(self) -> None:
        messages = [
            user_text("old"),
            types.Content(role="model", parts=[text_part("hi")]),
            user_text("first"),
            user_text("second"),
        ]

        merged = trailing_user_content(messages)

        assert merged.role == "user"
        assert [part.text for part in merged.parts] == ["first", "second"]

    def test_none_when_model_spoke_last(self) -> None:
        assert trailing_user_content([types.Content(role="model", parts=[text_part("x")])]) is None
        assert trailing_user_content([]) is None


class TestAdkStreamingAgent:
    @pytest.mark.asyncio
    async def test_forwards_user_message_to_runner(self) -> None:
        runner = RecordingRunner([model_event(text_part("hello"))])
        agent = AdkStreamingAgent(runner, user_id="u")

        events = await drain(agent, [user_text("hi")])

        assert [e.content.parts[0].text for e in events] == ["hello"]
        [call] = runner.calls
        assert call["user_id"] == "u"
        assert call["session_id"] == "t-1"
        assert call["invocation_id"] is None
        assert [part.text for part in call["new_message"].parts] == ["hi"]
        assert call["run_config"].streaming_mode == StreamingMode.SSE
        assert runner.session_service.created == ["t-1"]

    @pytest.mark.asyncio
    async def test_streaming_can_be_disabled(self) -> None:
        runner = RecordingRunner()
        agent = AdkStreamingAgent(runner, user_id="u", streaming=False)

        await drain(agent, [user_text("hi")])

        assert runner.calls[0]["run_config"].streaming_mode == StreamingMode.NONE

    @pytest.mark.asyncio
    async def test_without_trailing_user_message_nothing_runs(self) -> None:
        runner = RecordingRunner()
        agent = AdkStreamingAgent(runner, user_id="u")
        history = [user_text("hi"), types.Content(role="model", parts=[text_part("hello")])]

        assert await drain(agent, history) == []
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_parallel_approvals_resume_paused_invocation_together(self) -> None:
        """Two decisions sent as two tool messages both reach ADK in one resume."""
        runner = RecordingRunner(
            [
                model_event(
                    confirmation_call("a1", "execute_command", {"command": "backup db1"}),
                    confirmation_call("a2", "execute_command", {"command": "backup db2"}),
                )
            ],
            [model_event(text_part("Both backups done."))],
        )
        agent = ServerFunctionApprovalAgent(AdkStreamingAgent(runner, user_id="u"))

        first = await drain(agent, [user_text("back up db1 and db2")])
        calls = [part.function_call for part in first[0].content.parts]
        client_history = [
            {"role": "user", "content": "back up db1 and db2"},
            {
                "role": "assistant",
                "toolCalls": [
                    {
                        "id": call.id,
                        "function": {"name": call.name, "arguments": json.dumps(call.args)},
                    }
                    for call in calls
                ],
            },
            *(
                {
                    "role": "tool",
                    "toolCallId": call.id,
                    "content": json.dumps({"approval_id": call.id, "approved": True}),
                }
                for call in calls
            ),
        ]

        await drain(agent, to_adk_contents(client_history))

        assert len(runner.calls) == 2
        resume = runner.calls[1]
        assert resume["invocation_id"] == "inv-1"
        assert response_ids(resume["new_message"]) == ["a1", "a2"]
        assert all(
            part.function_response.name == REQUEST_CONFIRMATION_FUNCTION_CALL_NAME
            and part.function_response.response == {"confirmed": True}
            for part in resume["new_message"].parts
        )

    @pytest.mark.asyncio
    async def test_text_next_to_a_decision_starts_a_new_invocation(self) -> None:
        runner = RecordingRunner([model_event(confirmation_call("a1", "execute_command"))])
        agent = AdkStreamingAgent(runner, user_id="u")
        await drain(agent, [user_text("run ls")])

        decision = types.Part(
            function_response=types.FunctionResponse(
                id="a1", name=REQUEST_CONFIRMATION_FUNCTION_CALL_NAME, response={"confirmed": False}
            )
        )
        history = [
            user_text("run ls"),
            types.Content(role="model", parts=[confirmation_call("a1", "execute_command")]),
            types.Content(role="user", parts=[decision]),
            user_text("never mind, just say hi"),
        ]

        await drain(agent, history)

        assert [c["invocation_id"] for c in runner.calls[1:]] == ["inv-1", None]
        assert response_ids(runner.calls[1]["new_message"]) == ["a1"]
        assert runner.calls[2]["new_message"].parts[0].text == "never mind, just say hi"

    @pytest.mark.asyncio
    async def test_paused_invocation_is_resumed_once(self) -> None:
        runner = RecordingRunner([model_event(confirmation_call("a1", "execute_command"))])
        agent = AdkStreamingAgent(runner, user_id="u")
        await drain(agent, [user_text("run ls")])
        decision = types.Content(
            role="user",
            parts=[
                types.Part(
                    function_response=types.FunctionResponse(
                        id="a1",
                        name=REQUEST_CONFIRMATION_FUNCTION_CALL_NAME,
                        response={"confirmed": True},
                    )
                )
            ],
        )

        await drain(agent, [decision])
        await drain(agent, [decision])

        assert [c["invocation_id"] for c in runner.calls] == [None, "inv-1", None]


def test_execute_command_is_simulated() -> None:
    result = execute_command("pg_dump db1", "Back up db1")

    assert result == "Successfully executed: pg_dump db1\nResult: Task completed - Back up db1"


def test_workflow_assistant_wiring(settings: Settings) -> None:
    runner = workflow_assistant.create_runner(settings=settings)
    agent = workflow_assistant.build_agent(settings)

    assert runner.app_name == "test_app"
    assert agent.name == "WorkflowAssistant"
    assert agent.model == "test-model"
    assert [tool.name for tool in agent.tools] == ["execute_command"]


def test_workflow_assistant_app_is_resumable(settings: Settings) -> None:
    app = workflow_assistant.build_app(settings)

    assert isinstance(app, App)
    assert app.name == "test_app"
    assert app.resumability_config.is_resumable is True
