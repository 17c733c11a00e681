"""
Multi-turn customer support desk for the BrewHaven store.

Every customer message is triaged first. The first message, and any message
whose category differs from the agent currently handling the customer, routes
the conversation to a specialist (a topic change). Specialists may ask for
escalation by writing ``[ESCALATE: reason]``; triage may request it directly.
Once escalated, a conversation accepts no more messages until it is reset.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, field_validator

from ..agents.brewhaven import SUPPORT_AGENTS, display_name
from ..domain.models import ConversationMessage, EscalationTicket
from ..logging import get_logger
from ..ports import ConversationStorePort, TextAgent
from ..triage.parsing import parse_json_model
from .escalation import EscalationService

ESCALATION_MARKER = "[ESCALATE:"
DEFAULT_ESCALATION_REASON = "Agent requested escalation"

logger = get_logger(__name__)


class Priority(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    URGENT = "Urgent"


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    FRUSTRATED = "Frustrated"
    ANGRY = "Angry"


class SupportTriageResult(BaseModel):
    category: Literal["orders", "technical", "refund", "products"] = "products"
    priority: Priority = Priority.NORMAL
    sentiment: Sentiment = Sentiment.NEUTRAL
    requires_escalation: bool = False
    escalation_reason: str | None = None

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("priority", "sentiment", mode="before")
    @classmethod
    def normalize_enum(cls, v: Any) -> Any:
        return v.strip().capitalize() if isinstance(v, str) else v


@dataclass
class SupportSession:
    conversation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    current_agent: str | None = None
    escalated: bool = False
    threads: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class SupportReply:
    customer_id: str
    status: Literal["answered", "escalated", "blocked"]
    message: str
    agent_type: str | None = None
    agent_name: str | None = None
    previous_agent: str | None = None
    topic_changed: bool = False
    triage: SupportTriageResult | None = None
    ticket: EscalationTicket | None = None


def build_history_context(history: list[ConversationMessage], limit: int = 10) -> str:
    if not history:
        return "(New conversation)"
    return "\n".join(
        f"[{message.timestamp:%H:%M}] "
        f"{'Customer' if message.role == 'customer' else 'Agent'}: {message.content}"
        for message in history[-limit:]
    )


def parse_escalation_marker(text: str) -> str | None:
    """Return the escalation reason in ``[ESCALATE: reason]``, or None without a marker."""
    start = text.find(ESCALATION_MARKER)
    if start < 0:
        return None
    start += len(ESCALATION_MARKER)
    end = text.find("]", start)
    reason = text[start:end].strip() if end > start else ""
    return reason or DEFAULT_ESCALATION_REASON


class SupportDesk:
    def __init__(
        self,
        *,
        triage_agent: TextAgent,
        support_agents: dict[str, TextAgent],
        store: ConversationStorePort,
        escalation: EscalationService,
        history_limit: int = 10,
        triage_history_limit: int = 5,
    ) -> None:
        missing = set(SUPPORT_AGENTS) - set(support_agents)
        if missing:
            raise ValueError(f"Missing support agents: {sorted(missing)}")
        self.triage_agent = triage_agent
        self.support_agents = support_agents
        self.store = store
        self.escalation = escalation
        self.history_limit = history_limit
        self.triage_history_limit = triage_history_limit
        # Sessions live until reset; locks only while someone holds or awaits them.
        self._sessions: dict[str, SupportSession] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    async def handle_message(self, customer_id: str, text: str) -> SupportReply:
        async with self._customer_lock(customer_id):
            return await self._handle_message(customer_id, text)

    async def reset(self, customer_id: str) -> None:
        """Start a new conversation: forget history, agent threads and escalation."""
        async with self._customer_lock(customer_id):
            self._sessions.pop(customer_id, None)
            await self.store.clear(customer_id)
        logger.info("conversation_reset", customer_id=customer_id)

    @asynccontextmanager
    async def _customer_lock(self, customer_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(customer_id, asyncio.Lock())
        self._lock_users[customer_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[customer_id] -= 1
            if not self._lock_users[customer_id]:
                del self._lock_users[customer_id]
                del self._locks[customer_id]

    async def _handle_message(self, customer_id: str, text: str) -> SupportReply:
        session = self._sessions.setdefault(customer_id, SupportSession())
        if session.escalated:
            return SupportReply(
                customer_id=customer_id,
                status="blocked",
                message=(
                    "Your case has been escalated. A supervisor will contact you. "
                    "Start a new conversation to continue."
                ),
            )

        await self.store.add_message(customer_id, "customer", text)
        triage = await self._run_triage(customer_id, text)

        previous = session.current_agent
        topic_changed = previous is not None and triage.category != previous
        if topic_changed:
            logger.info(
                "topic_changed",
                customer_id=customer_id,
                previous=previous,
                current=triage.category,
            )

        if previous is None or topic_changed:
            if triage.requires_escalation:
                ticket = await self._escalate(
                    customer_id, session, triage.escalation_reason or "Complex issue"
                )
                return SupportReply(
                    customer_id=customer_id,
                    status="escalated",
                    message=(
                        f"Your case has been escalated (ticket {ticket.ticket_id}). "
                        "A manager will contact you within 24 hours."
                    ),
                    previous_agent=previous,
                    topic_changed=topic_changed,
                    triage=triage,
                    ticket=ticket,
                )
            session.current_agent = triage.category

        agent_type = session.current_agent or triage.category
        first_in_thread = agent_type not in session.threads
        session.threads.add(agent_type)
        if first_in_thread or topic_changed:
            history = await self.store.get_history(customer_id)
            prompt = (
                f"Customer message: {text}\n\n"
                f"Conversation history:\n{build_history_context(history, self.history_limit)}"
            )
        else:
            prompt = text

        response = await self.support_agents[agent_type].run(
            prompt, session_id=f"{customer_id}:{session.conversation_id}:{agent_type}"
        )

        reply = dict(
            customer_id=customer_id,
            message=response,
            agent_type=agent_type,
            agent_name=display_name(agent_type),
            previous_agent=previous,
            topic_changed=topic_changed,
            triage=triage,
        )
        reason = parse_escalation_marker(response)
        if reason is not None:
            ticket = await self._escalate(customer_id, session, reason)
            return SupportReply(status="escalated", ticket=ticket, **reply)

        await self.store.add_message(customer_id, agent_type, response)
        return SupportReply(status="answered", **reply)

    async def _run_triage(self, customer_id: str, text: str) -> SupportTriageResult:
        history = await self.store.get_history(customer_id)
        context = ""
        if history:
            recent = build_history_context(history, self.triage_history_limit)
            context = f"\n\nRecent conversation:\n{recent}"

        output = await self.triage_agent.run(f"Customer says: {text}{context}")
        parsed = parse_json_model(output, SupportTriageResult)
        if not parsed.ok:
            logger.warning("support_triage_parse_failed", customer_id=customer_id, error=parsed.error)
        return parsed.unwrap_or(SupportTriageResult(category="products"))

    async def _escalate(
        self, customer_id: str, session: SupportSession, reason: str
    ) -> EscalationTicket:
        history = await self.store.get_history(customer_id)
        summary = "\n".join(f"{message.role}: {message.content}" for message in history)
        ticket = await self.escalation.create_ticket(customer_id, reason, summary)
        await self.escalation.notify_supervisor(ticket)
        await self.store.add_message(customer_id, "system", f"Escalated: {ticket.ticket_id}")
        session.escalated = True
        return ticket
