"""
Port definition for per-customer conversation history.
"""

from __future__ import annotations

from typing import Protocol

from ..domain.models import ConversationMessage


class ConversationStorePort(Protocol):
    async def add_message(self, customer_id: str, role: str, content: str) -> None: ...

    async def get_history(self, customer_id: str) -> list[ConversationMessage]: ...

    async def clear(self, customer_id: str) -> None: ...


__all__ = ["ConversationMessage", "ConversationStorePort"]
