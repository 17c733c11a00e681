"""
Client StreamChunk models and SSE helpers.
"""

from __future__ import annotations

import json
import time
from typing import Literal

from pydantic import BaseModel

StreamChunkType = Literal[
    "content",
    "tool_call",
    "tool_result",
    "error",
    "done",
]


class BaseStreamChunk(BaseModel):
    id: str
    model: str
    timestamp: int
    type: StreamChunkType


class ContentStreamChunk(BaseStreamChunk):
    type: Literal["content"] = "content"
    content: str
    delta: str
    role: Literal["assistant"] | None = None


class ToolCallFunction(BaseModel):
    name: str
    arguments: str


class ToolCall(BaseModel):
    id: str
    type: Literal["function"] = "function"
    function: ToolCallFunction


class ToolCallStreamChunk(BaseStreamChunk):
    type: Literal["tool_call"] = "tool_call"
    index: int
    toolCall: ToolCall


class ToolResultStreamChunk(BaseStreamChunk):
    type: Literal["tool_result"] = "tool_result"
    toolCallId: str
    content: str


class ErrorObj(BaseModel):
    message: str
    code: str | None = None


class ErrorStreamChunk(BaseStreamChunk):
    type: Literal["error"] = "error"
    error: ErrorObj


class DoneStreamChunk(BaseStreamChunk):
    type: Literal["done"] = "done"
    finishReason: Literal["stop", "length", "tool_calls", "content_filter"]


StreamChunk = (
    ContentStreamChunk
    | ToolCallStreamChunk
    | ToolResultStreamChunk
    | ErrorStreamChunk
    | DoneStreamChunk
)


def now_ms() -> int:
    return int(time.time() * 1000)


def encode_chunk(chunk: StreamChunk) -> str:
    payload = json.dumps(chunk.model_dump(by_alias=True), ensure_ascii=False)
    return f"data: {payload}\n\n"


def encode_done() -> str:
    return "data: [DONE]\n\n"
