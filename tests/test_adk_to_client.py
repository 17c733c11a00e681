"""Tests for ADK event -> client StreamChunk adaptation."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator

import pytest
from google.adk.events.event import Event
from google.adk.events.event_actions import EventActions
from google.adk.flows.llm_flows.functions import REQUEST_CONFIRMATION_FUNCTION_CALL_NAME
from google.adk.tools.tool_confirmation import ToolConfirmation
from google.genai import types

from conftest import model_event, text_part
from hitl_backend.adapters.adk_to_client import ClientStreamAdapter
from hitl_backend.adapters.client_stream import encode_chunk, encode_done
from hitl_backend.errors import ProtocolError


async def replay(*events: Event, error: Exception | None = None) -> AsyncIterator[Event]:
    for event in events:
        yield event
    if error is not None:
        raise error


async def run(adapter: ClientStreamAdapter, events: AsyncIterator[Event]) -> list:
    return [chunk async for chunk in adapter.stream(events)]


def tool_event(*parts: types.Part, actions: EventActions | None = None) -> Event:
    return Event(
        author="WorkflowAssistant",
        content=types.Content(role="user", parts=list(parts)),
        actions=actions or EventActions(),
    )


@pytest.fixture
def adapter() -> ClientStreamAdapter:
    return ClientStreamAdapter(run_id="run-1", model="test-model")


class TestText:
    @pytest.mark.asyncio
    async def test_partial_text_streams_as_deltas(self, adapter: ClientStreamAdapter) -> None:
        chunks = await run(
            adapter,
            replay(
                model_event(text_part("Hel"), partial=True),
                model_event(text_part("lo"), partial=True),
                model_event(text_part("Hello")),
            ),
        )

        assert [c.delta for c in chunks] == ["Hel", "lo"]
        assert chunks[-1].content == "Hello"
        assert all(c.id == "run-1" and c.model == "test-model" for c in chunks)

    @pytest.mark.asyncio
    async def test_final_text_without_partials_is_emitted(
        self, adapter: ClientStreamAdapter
    ) -> None:
        chunks = await run(
            adapter,
            replay(model_event(text_part("First. ")), model_event(text_part("Second."))),
        )

        assert [c.delta for c in chunks] == ["First. ", "Second."]
        assert chunks[-1].content == "First. Second."

    @pytest.mark.asyncio
    async def test_thoughts_are_not_streamed(self, adapter: ClientStreamAdapter) -> None:
        thought = types.Part(text="thinking...", thought=True)

        chunks = await run(adapter, replay(model_event(thought, text_part("Answer"))))

        assert [c.delta for c in chunks] == ["Answer"]


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_request_approval_marks_run_as_waiting(
        self, adapter: ClientStreamAdapter
    ) -> None:
        call = types.FunctionCall(
            id="a1", name="request_approval", args={"request": {"approval_id": "a1"}}
        )

        [chunk] = await run(adapter, replay(model_event(types.Part(function_call=call))))

        assert chunk.type == "tool_call"
        assert chunk.index == 0
        assert chunk.toolCall.id == "a1"
        assert chunk.toolCall.function.name == "request_approval"
        assert json.loads(chunk.toolCall.function.arguments) == {
            "request": {"approval_id": "a1"}
        }
        assert adapter.awaiting_approval is True
        assert adapter.finish_reason == "tool_calls"

    @pytest.mark.asyncio
    async def test_other_calls_get_running_index(self, adapter: ClientStreamAdapter) -> None:
        first = types.Part(function_call=types.FunctionCall(name="lookup", args={}))
        second = types.Part(function_call=types.FunctionCall(id="t2", name="lookup", args={}))

        chunks = await run(adapter, replay(model_event(first), model_event(second)))

        assert [c.index for c in chunks] == [0, 1]
        assert chunks[0].toolCall.id.startswith("tool_")
        assert adapter.finish_reason == "stop"

    @pytest.mark.asyncio
    async def test_partial_events_skip_calls(self, adapter: ClientStreamAdapter) -> None:
        call = types.Part(function_call=types.FunctionCall(id="t1", name="lookup", args={}))

        chunks = await run(adapter, replay(model_event(call, partial=True)))

        assert chunks == []


class TestToolResults:
    @pytest.mark.asyncio
    async def test_output_is_streamed(self, adapter: ClientStreamAdapter) -> None:
        response = types.FunctionResponse(
            id="t1", name="execute_command", response={"result": "Successfully executed: ls"}
        )

        [chunk] = await run(adapter, replay(tool_event(types.Part(function_response=response))))

        assert chunk.type == "tool_result"
        assert chunk.toolCallId == "t1"
        assert chunk.content == "Successfully executed: ls"

    @pytest.mark.asyncio
    async def test_non_string_result_is_json(self, adapter: ClientStreamAdapter) -> None:
        response = types.FunctionResponse(id="t1", name="lookup", response={"rows": [1, 2]})

        [chunk] = await run(adapter, replay(tool_event(types.Part(function_response=response))))

        assert json.loads(chunk.content) == {"rows": [1, 2]}

    @pytest.mark.asyncio
    async def test_confirmation_traffic_is_hidden(self, adapter: ClientStreamAdapter) -> None:
        confirmation = types.FunctionResponse(
            id="a1", name=REQUEST_CONFIRMATION_FUNCTION_CALL_NAME, response={"confirmed": True}
        )
        placeholder = types.FunctionResponse(
            id="t1", name="execute_command", response={"error": "needs confirmation"}
        )
        actions = EventActions(
            requested_tool_confirmations={"t1": ToolConfirmation(hint="approve?")}
        )

        chunks = await run(
            adapter,
            replay(
                tool_event(types.Part(function_response=confirmation)),
                tool_event(types.Part(function_response=placeholder), actions=actions),
            ),
        )

        assert chunks == []


class TestErrors:
    @pytest.mark.asyncio
    async def test_protocol_error_becomes_error_chunk(self, adapter: ClientStreamAdapter) -> None:
        chunks = await run(
            adapter,
            replay(model_event(text_part("ok")), error=ProtocolError("bad approval")),
        )

        assert chunks[0].type == "content"
        assert chunks[1].type == "error"
        assert chunks[1].error.message == "bad approval"
        assert chunks[1].error.code == "protocol_error"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_error_chunk(
        self, adapter: ClientStreamAdapter
    ) -> None:
        [chunk] = await run(adapter, replay(error=RuntimeError("model down")))

        assert chunk.type == "error"
        assert chunk.error.message == "model down"
        assert chunk.error.code is None


def test_sse_encoding(adapter: ClientStreamAdapter) -> None:
    chunk = adapter._error("boom")

    encoded = encode_chunk(chunk)

    assert encoded.startswith("data: ")
    assert encoded.endswith("\n\n")
    assert json.loads(encoded[len("data: ") :])["error"]["message"] == "boom"
    assert encode_done() == "data: [DONE]\n\n"
