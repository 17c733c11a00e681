"""Translate (approval-translated) ADK events into client StreamChunks."""

from __future__ import annotations

import json
import uuid
from collections.abc import AsyncIterator
from typing import Any

from google.adk.events.event import Event
from google.adk.flows.llm_flows.functions import REQUEST_CONFIRMATION_FUNCTION_CALL_NAME
from google.genai import types

from ..errors import ProtocolError
from ..logging import get_logger
from .approval_translator import REQUEST_APPROVAL_TOOL_NAME
from .client_stream import (
    ContentStreamChunk,
    ErrorObj,
    ErrorStreamChunk,
    StreamChunk,
    ToolCall,
    ToolCallFunction,
    ToolCallStreamChunk,
    ToolResultStreamChunk,
    now_ms,
)

logger = get_logger(__name__)


class ClientStreamAdapter:
    def __init__(self, *, run_id: str, model: str) -> None:
        self.run_id = run_id
        self.model = model
        self.awaiting_approval = False
        self._content = ""
        self._turn_text = ""
        self._tool_call_index = 0

    @property
    def finish_reason(self) -> str:
        return "tool_calls" if self.awaiting_approval else "stop"

    async def stream(self, events: AsyncIterator[Event]) -> AsyncIterator[StreamChunk]:
        try:
            async for event in events:
                for chunk in self._event_to_chunks(event):
                    yield chunk
        except ProtocolError as exc:
            logger.warning("approval_protocol_error", error=str(exc))
            yield self._error(str(exc), code="protocol_error")
        except Exception as exc:
            logger.exception("agent_run_failed")
            yield self._error(str(exc))

    def _event_to_chunks(self, event: Event) -> list[StreamChunk]:
        content = event.content
        if not content or not content.parts:
            return []

        chunks: list[StreamChunk] = []
        for part in content.parts:
            if part.text and not part.thought:
                chunk = self._text_chunk(part.text, partial=bool(event.partial))
                if chunk is not None:
                    chunks.append(chunk)

            # Partial events only preview text; calls arrive in the final event.
            if event.partial:
                continue

            if part.function_call:
                chunks.append(self._tool_call_chunk(part.function_call))

            if part.function_response:
                chunk = self._tool_result_chunk(event, part.function_response)
                if chunk is not None:
                    chunks.append(chunk)

        if not event.partial:
            self._turn_text = ""
        return chunks

    def _text_chunk(self, text: str, *, partial: bool) -> ContentStreamChunk | None:
        if partial:
            delta = text
            self._turn_text += delta
        elif self._turn_text and text.startswith(self._turn_text):
            delta = text[len(self._turn_text) :]
        else:
            delta = text
        if not delta:
            return None
        self._content += delta
        return ContentStreamChunk(
            id=self.run_id,
            model=self.model,
            timestamp=now_ms(),
            content=self._content,
            delta=delta,
            role="assistant",
        )

    def _tool_call_chunk(self, function_call: types.FunctionCall) -> ToolCallStreamChunk:
        if function_call.name == REQUEST_APPROVAL_TOOL_NAME:
            self.awaiting_approval = True
        arguments = json.dumps(function_call.args or {}, ensure_ascii=False)
        return ToolCallStreamChunk(
            id=self.run_id,
            model=self.model,
            timestamp=now_ms(),
            index=self._next_tool_call_index(),
            toolCall=ToolCall(
                id=function_call.id or f"tool_{uuid.uuid4().hex}",
                function=ToolCallFunction(
                    name=function_call.name or "",
                    arguments=arguments,
                ),
            ),
        )

    def _tool_result_chunk(
        self, event: Event, function_response: types.FunctionResponse
    ) -> ToolResultStreamChunk | None:
        if function_response.name == REQUEST_CONFIRMATION_FUNCTION_CALL_NAME:
            return None

        # Placeholder result ADK records for a tool that is waiting on confirmation
        if (
            event.actions.requested_tool_confirmations
            and function_response.id in event.actions.requested_tool_confirmations
        ):
            return None

        content = self._extract_tool_result_content(function_response.response)
        if content is None:
            return None

        return ToolResultStreamChunk(
            id=self.run_id,
            model=self.model,
            timestamp=now_ms(),
            toolCallId=function_response.id or "",
            content=content,
        )

    def _extract_tool_result_content(self, response: dict[str, Any] | None) -> str | None:
        if response is None:
            return None
        value: Any
        if "output" in response:
            value = response["output"]
        elif "result" in response:
            value = response["result"]
        else:
            value = response

        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False)

    def _error(self, message: str, *, code: str | None = None) -> ErrorStreamChunk:
        return ErrorStreamChunk(
            id=self.run_id,
            model=self.model,
            timestamp=now_ms(),
            error=ErrorObj(message=message, code=code),
        )

    def _next_tool_call_index(self) -> int:
        value = self._tool_call_index
        self._tool_call_index += 1
        return value
