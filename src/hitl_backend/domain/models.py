"""Domain models for approvals, conversations and escalations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, StrictBool


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApprovalRequest(BaseModel):
    """Pending permission request sent to the client as a `request_approval` call."""

    model_config = ConfigDict(frozen=True)

    approval_id: str
    function_name: str
    function_arguments: dict[str, Any] | None = None
    message: str | None = None

    @classmethod
    def for_call(
        cls,
        approval_id: str,
        function_name: str,
        function_arguments: dict[str, Any] | None,
    ) -> ApprovalRequest:
        return cls(
            approval_id=approval_id,
            function_name=function_name,
            function_arguments=function_arguments,
            message=f"Approve execution of '{function_name}'?",
        )


class ApprovalResponse(BaseModel):
    """The user's decision, returned by the client as a tool result."""

    model_config = ConfigDict(frozen=True)

    approval_id: str
    approved: StrictBool


@dataclass(frozen=True)
class ConversationMessage:
    role: str
    content: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class EscalationTicket:
    ticket_id: str
    customer_id: str
    reason: str
    summary: str
    created_at: datetime = field(default_factory=_utcnow)
