"""
Conversation store backends and factory.
"""

from __future__ import annotations

from collections import defaultdict

from ..domain.models import ConversationMessage
from ..ports import ConversationStorePort
from ..settings import Settings


class InMemoryConversationStore(ConversationStorePort):
    """Append-only message log per customer, kept in process memory."""

    def __init__(self) -> None:
        self._histories: dict[str, list[ConversationMessage]] = defaultdict(list)

    async def add_message(self, customer_id: str, role: str, content: str) -> None:
        self._histories[customer_id].append(ConversationMessage(role=role, content=content))

    async def get_history(self, customer_id: str) -> list[ConversationMessage]:
        return list(self._histories.get(customer_id, ()))

    async def clear(self, customer_id: str) -> None:
        self._histories.pop(customer_id, None)


def create_conversation_store(settings: Settings) -> ConversationStorePort:
    """Create the conversation store selected by ``conversation_store_backend``."""
    backend = settings.conversation_store_backend
    if backend == "memory":
        return InMemoryConversationStore()

    raise RuntimeError(
        f"Unsupported conversation store backend: {backend}. Only 'memory' is supported."
    )
