"""
Port definitions for agents the application drives.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import TYPE_CHECKING, Protocol

from google.adk.events.event import Event
from google.genai import types

if TYPE_CHECKING:
    from ..runtime import RunResponse


class AgentStreamPort(Protocol):
    def run_stream(
        self, messages: Sequence[types.Content], *, session_id: str
    ) -> AsyncIterator[Event]: ...


class TextAgent(Protocol):
    async def run(self, prompt: str, *, session_id: str | None = None) -> str: ...


class ResponseAgent(Protocol):
    async def run_response(
        self, prompt: str, *, session_id: str | None = None
    ) -> RunResponse: ...


__all__ = ["AgentStreamPort", "ResponseAgent", "TextAgent"]
