"""Escalation of support conversations to a human supervisor."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Protocol

from ..domain.models import EscalationTicket
from ..logging import get_logger

logger = get_logger(__name__)


class EscalationService(Protocol):
    async def create_ticket(
        self, customer_id: str, reason: str, summary: str
    ) -> EscalationTicket: ...

    async def notify_supervisor(self, ticket: EscalationTicket) -> None: ...


class LoggingEscalationService:
    """Creates tickets in memory and notifies the supervisor through the log."""

    def __init__(self) -> None:
        self.tickets: list[EscalationTicket] = []

    async def create_ticket(
        self, customer_id: str, reason: str, summary: str
    ) -> EscalationTicket:
        now = datetime.now(timezone.utc)
        ticket = EscalationTicket(
            ticket_id=f"ESC-{now:%Y%m%d%H%M%S}-{uuid.uuid4().hex[:6].upper()}",
            customer_id=customer_id,
            reason=reason,
            summary=summary,
            created_at=now,
        )
        self.tickets.append(ticket)
        return ticket

    async def notify_supervisor(self, ticket: EscalationTicket) -> None:
        logger.warning(
            "escalated_to_supervisor",
            ticket_id=ticket.ticket_id,
            customer_id=ticket.customer_id,
            reason=ticket.reason,
        )
