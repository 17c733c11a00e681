from .agent import AgentStreamPort, ResponseAgent, TextAgent
from .conversation_store import ConversationMessage, ConversationStorePort

__all__ = [
    "AgentStreamPort",
    "ConversationMessage",
    "ConversationStorePort",
    "ResponseAgent",
    "TextAgent",
]
