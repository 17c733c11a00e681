"""
Loan application processing through the sequential review pipeline.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from ..agents.loan_pipeline import LOAN_OFFICER, STAGE_NAMES
from ..logging import get_logger
from ..ports import ResponseAgent
from ..runtime import RunResponse

logger = get_logger(__name__)

DECISIONS = ("APPROVED WITH CONDITIONS", "APPROVED", "DENIED")

# Longer alternatives first so "APPROVED WITH CONDITIONS" wins over "APPROVED".
_DECISION_RE = re.compile(
    r"Decision:\W*(" + "|".join(re.escape(d) for d in DECISIONS) + r")\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class StageOutput:
    agent: str
    output: str


@dataclass(frozen=True)
class LoanOutcome:
    application_id: str
    stages: list[StageOutput]
    decision: str | None
    output: str


def new_application_id(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"LOAN-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


def parse_decision(text: str) -> str | None:
    """Read the ``Decision:`` line of the loan officer's answer."""
    match = _DECISION_RE.search(text)
    return match.group(1).upper() if match else None


def stage_outputs(response: RunResponse) -> list[StageOutput]:
    """Final text of each pipeline stage that answered, in pipeline order."""
    texts: dict[str, list[str]] = {}
    for event in response.events:
        if event.partial or event.content is None or event.author not in STAGE_NAMES:
            continue
        for part in event.content.parts or []:
            if part.text and not part.thought:
                texts.setdefault(event.author, []).append(part.text)
    return [
        StageOutput(agent=name, output="".join(texts[name]))
        for name in STAGE_NAMES
        if name in texts
    ]


class LoanApplicationPipeline:
    def __init__(self, pipeline: ResponseAgent) -> None:
        self.pipeline = pipeline

    async def run(self, application: str) -> LoanOutcome:
        application_id = new_application_id()
        response = await self.pipeline.run_response(application, session_id=application_id)

        stages = stage_outputs(response)
        answered = [stage.agent for stage in stages]
        if answered != STAGE_NAMES:
            logger.warning(
                "loan_pipeline_incomplete", application_id=application_id, stages=answered
            )

        final = stages[-1].output if stages and stages[-1].agent == LOAN_OFFICER else ""
        decision = parse_decision(final)
        logger.info("loan_decided", application_id=application_id, decision=decision)
        return LoanOutcome(
            application_id=application_id,
            stages=stages,
            decision=decision,
            output=final,
        )
