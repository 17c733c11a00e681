"""
Banking customer service desk: triage hands each customer to a specialist.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from ..agents.banking import display_name
from ..logging import get_logger
from ..ports import ResponseAgent
from ..runtime import RunResponse

logger = get_logger(__name__)


@dataclass(frozen=True)
class BankingReply:
    customer_id: str
    message: str
    handled_by: str | None
    handoffs: list[str] = field(default_factory=list)


def transfers(response: RunResponse) -> list[str]:
    """Agents the conversation was transferred to during one run, in order."""
    return [
        event.actions.transfer_to_agent
        for event in response.events
        if event.actions and event.actions.transfer_to_agent
    ]


def last_speaker(response: RunResponse) -> str | None:
    """Author of the last final event that carried text."""
    for event in reversed(response.events):
        if event.partial or event.content is None:
            continue
        if any(part.text and not part.thought for part in event.content.parts or []):
            return event.author
    return None


class BankingDesk:
    """Keeps one ADK session per customer so a handoff lasts across messages."""

    def __init__(self, agent: ResponseAgent) -> None:
        self.agent = agent
        self._conversations: dict[str, str] = {}

    async def handle_message(self, customer_id: str, text: str) -> BankingReply:
        conversation_id = self._conversations.setdefault(customer_id, uuid.uuid4().hex[:12])
        response = await self.agent.run_response(
            text, session_id=f"{customer_id}:{conversation_id}"
        )

        handoffs = transfers(response)
        for target in handoffs:
            logger.info("banking_handoff", customer_id=customer_id, to_agent=target)
        speaker = last_speaker(response)
        return BankingReply(
            customer_id=customer_id,
            message=response.text if speaker is None else _text_of(response, speaker),
            handled_by=display_name(speaker),
            handoffs=[display_name(target) or target for target in handoffs],
        )

    async def reset(self, customer_id: str) -> None:
        self._conversations.pop(customer_id, None)
        logger.info("banking_conversation_reset", customer_id=customer_id)


def _text_of(response: RunResponse, author: str) -> str:
    # Triage's short "let me connect you" note is dropped once a specialist answers.
    return "".join(
        part.text
        for event in response.events
        if event.author == author and not event.partial and event.content is not None
        for part in event.content.parts or []
        if part.text and not part.thought
    )
