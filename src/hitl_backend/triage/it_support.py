"""
IT support ticket triage: classify a ticket, route it to one specialist, format the answer.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from ..agents.it_support import SPECIALISTS
from ..logging import get_logger
from ..ports import TextAgent
from .parsing import parse_json_model

DEFAULT_CATEGORY = "general"

logger = get_logger(__name__)


class TriageResult(BaseModel):
    category: str = DEFAULT_CATEGORY
    priority: str = "medium"
    summary: str = ""
    reasoning: str = ""
    original_request: str = Field(default="", exclude=True)
    ticket_id: str = Field(default="", exclude=True)

    @classmethod
    def fallback(cls) -> TriageResult:
        return cls(
            category=DEFAULT_CATEGORY,
            priority="medium",
            summary="Unable to categorize automatically",
            reasoning="Failed to parse triage response",
        )


class SpecialistResponse(BaseModel):
    ticket_id: str
    category: str
    priority: str
    response: str
    specialist: str


@dataclass(frozen=True)
class TriageOutcome:
    triage: TriageResult
    response: SpecialistResponse
    output: str


def new_ticket_id(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"TKT-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


def route_category(result: TriageResult | None) -> str:
    """Pick the specialist category for a triage result; unknown goes to general."""
    if result is None:
        return DEFAULT_CATEGORY
    category = result.category.strip().lower()
    return category if category in SPECIALISTS else DEFAULT_CATEGORY


class TriageAnalysisExecutor:
    def __init__(self, triage_agent: TextAgent) -> None:
        self.triage_agent = triage_agent

    async def handle(self, ticket: str) -> TriageResult:
        ticket_id = new_ticket_id()
        text = await self.triage_agent.run(ticket)

        parsed = parse_json_model(text, TriageResult)
        if not parsed.ok:
            logger.warning("triage_parse_failed", ticket_id=ticket_id, error=parsed.error)
        result = parsed.unwrap_or(TriageResult.fallback())
        return result.model_copy(update={"original_request": ticket, "ticket_id": ticket_id})


class SpecialistExecutor:
    def __init__(self, name: str, specialist_agent: TextAgent) -> None:
        self.name = name
        self.specialist_agent = specialist_agent

    async def handle(self, triage: TriageResult) -> SpecialistResponse:
        prompt = (
            f"Ticket ID: {triage.ticket_id}\n"
            f"Priority: {triage.priority}\n"
            f"Category: {triage.category}\n"
            f"Summary: {triage.summary}\n"
            "\n"
            "Original Request:\n"
            f"{triage.original_request}\n"
            "\n"
            "Please provide a helpful response to resolve this issue."
        )
        text = await self.specialist_agent.run(prompt)
        return SpecialistResponse(
            ticket_id=triage.ticket_id,
            category=triage.category,
            priority=triage.priority,
            response=text,
            specialist=self.name,
        )


def format_ticket_output(response: SpecialistResponse) -> str:
    rule = "=" * 59
    thin = "-" * 59
    return "\n".join(
        [
            rule,
            f"TICKET: {response.ticket_id}",
            f"CATEGORY: {response.category.upper()}",
            f"PRIORITY: {response.priority.upper()}",
            f"HANDLED BY: {response.specialist}",
            rule,
            "",
            response.response,
            "",
            thin,
            "If this doesn't resolve your issue, please reply with more",
            "details or request escalation.",
            rule,
        ]
    )


class TriageWorkflow:
    """Triage analyzer -> one specialist (by category) -> formatted output."""

    def __init__(
        self,
        triage_agent: TextAgent,
        specialist_agents: dict[str, TextAgent],
    ) -> None:
        missing = set(SPECIALISTS) - set(specialist_agents)
        if missing:
            raise ValueError(f"Missing specialist agents: {sorted(missing)}")
        self.triage = TriageAnalysisExecutor(triage_agent)
        self.specialists = {
            category: SpecialistExecutor(SPECIALISTS[category][1], agent)
            for category, agent in specialist_agents.items()
        }
        self.tickets: dict[str, TriageResult] = {}

    async def run(self, ticket: str) -> TriageOutcome:
        triage = await self.triage.handle(ticket)
        self.tickets[triage.ticket_id] = triage
        logger.info(
            "ticket_triaged",
            ticket_id=triage.ticket_id,
            category=triage.category.upper(),
            priority=triage.priority,
        )

        specialist = self.specialists[route_category(triage)]
        response = await specialist.handle(triage)
        return TriageOutcome(
            triage=triage,
            response=response,
            output=format_ticket_output(response),
        )
