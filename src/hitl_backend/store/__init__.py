from .conversation_store import InMemoryConversationStore, create_conversation_store

__all__ = [
    "InMemoryConversationStore",
    "create_conversation_store",
]
