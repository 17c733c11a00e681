"""
FastAPI application for the human-in-the-loop agent demos (ADK backend).
"""

from __future__ import annotations

import json
import uuid
from collections.abc import AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from google.adk.agents import BaseAgent
from google.adk.sessions.in_memory_session_service import InMemorySessionService
from pydantic import BaseModel, Field
from structlog.contextvars import bound_contextvars

from .adapters.adk_to_client import ClientStreamAdapter
from .adapters.client_stream import DoneStreamChunk, encode_chunk, encode_done, now_ms
from .adapters.client_to_adk import to_adk_contents
from .agents import banking, brewhaven, it_support, loan_pipeline, workflow_assistant
from .approval_agent import ServerFunctionApprovalAgent
from .bank.handoffs import BankingDesk
from .bank.loans import LoanApplicationPipeline
from .errors import ProtocolError
from .llm.google_credentials import setup_google_credentials
from .logging import configure_logging, get_logger
from .ports import AgentStreamPort
from .runtime import AdkStreamingAgent, AdkTextAgent
from .settings import Settings, get_settings
from .store import create_conversation_store
from .support.desk import SupportDesk
from .support.escalation import LoggingEscalationService
from .triage.it_support import TriageWorkflow

logger = get_logger(__name__)


class TriageRequest(BaseModel):
    ticket: str = Field(min_length=1)


class SupportMessageRequest(BaseModel):
    text: str = Field(min_length=1)


class LoanApplicationRequest(BaseModel):
    application: str = Field(min_length=1)


def _sse_headers() -> dict[str, str]:
    """Standard SSE response headers."""
    return {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
    }


def build_chat_agent(settings: Settings) -> AgentStreamPort:
    runner = workflow_assistant.create_runner(
        settings=settings, session_service=InMemorySessionService()
    )
    inner = AdkStreamingAgent(
        runner, user_id=settings.adk_user_id, streaming=settings.streaming_enabled
    )
    return ServerFunctionApprovalAgent(inner)


def build_triage_workflow(settings: Settings) -> TriageWorkflow:
    session_service = InMemorySessionService()

    def text_agent(agent: BaseAgent) -> AdkTextAgent:
        return AdkTextAgent(
            agent,
            app_name=f"{settings.adk_app_name}_it_support",
            user_id=settings.adk_user_id,
            session_service=session_service,
        )

    return TriageWorkflow(
        text_agent(it_support.build_triage_agent(settings)),
        {
            category: text_agent(agent)
            for category, agent in it_support.build_specialist_agents(settings).items()
        },
    )


def build_support_desk(settings: Settings) -> SupportDesk:
    session_service = InMemorySessionService()

    def text_agent(agent: BaseAgent) -> AdkTextAgent:
        return AdkTextAgent(
            agent,
            app_name=f"{settings.adk_app_name}_support",
            user_id=settings.adk_user_id,
            session_service=session_service,
        )

    return SupportDesk(
        triage_agent=text_agent(brewhaven.build_triage_agent(settings)),
        support_agents={
            category: text_agent(agent)
            for category, agent in brewhaven.build_support_agents(settings).items()
        },
        store=create_conversation_store(settings),
        escalation=LoggingEscalationService(),
        history_limit=settings.history_context_limit,
        triage_history_limit=settings.triage_history_limit,
    )


def build_loan_pipeline(settings: Settings) -> LoanApplicationPipeline:
    return LoanApplicationPipeline(
        AdkTextAgent(
            loan_pipeline.build_pipeline_agent(settings),
            app_name=f"{settings.adk_app_name}_loans",
            user_id=settings.adk_user_id,
        )
    )


def build_banking_desk(settings: Settings) -> BankingDesk:
    return BankingDesk(
        AdkTextAgent(
            banking.build_banking_agent(settings),
            app_name=f"{settings.adk_app_name}_banking",
            user_id=settings.adk_user_id,
        )
    )


def create_app(
    settings: Settings | None = None,
    *,
    chat_agent: AgentStreamPort | None = None,
    triage_workflow: TriageWorkflow | None = None,
    support_desk: SupportDesk | None = None,
    loans: LoanApplicationPipeline | None = None,
    banking_desk: BankingDesk | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_dir)
    setup_google_credentials(settings)

    chat_agent = chat_agent or build_chat_agent(settings)
    triage_workflow = triage_workflow or build_triage_workflow(settings)
    support_desk = support_desk or build_support_desk(settings)
    loans = loans or build_loan_pipeline(settings)
    banking_desk = banking_desk or build_banking_desk(settings)

    app = FastAPI(
        title="HITL Agent Demo",
        description="ADK agents with human-in-the-loop approvals and support triage",
        version="0.1.0",
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/chat")
    async def chat(request: Request) -> StreamingResponse:
        body = await request.body()
        try:
            body_json = json.loads(body) if body else {}
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail="Body is not valid JSON") from exc
        if not isinstance(body_json, dict):
            raise HTTPException(status_code=400, detail="Body must be a JSON object")

        run_id = body_json.get("thread_id") or body_json.get("run_id") or uuid.uuid4().hex
        messages = body_json.get("messages") or []
        try:
            contents = to_adk_contents(messages)
        except ProtocolError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        async def stream() -> AsyncIterator[bytes]:
            with bound_contextvars(run_id=run_id):
                adapter = ClientStreamAdapter(run_id=run_id, model=settings.llm_model)
                if contents:
                    logger.info("chat_turn_started", message_count=len(contents))
                    events = chat_agent.run_stream(contents, session_id=run_id)
                    async for chunk in adapter.stream(events):
                        yield encode_chunk(chunk).encode("utf-8")

                yield encode_chunk(
                    DoneStreamChunk(
                        id=run_id,
                        model=settings.llm_model,
                        timestamp=now_ms(),
                        finishReason=adapter.finish_reason,
                    )
                ).encode("utf-8")
                yield encode_done().encode("utf-8")

        return StreamingResponse(
            stream(),
            headers=_sse_headers(),
        )

    @app.post("/api/triage")
    async def triage(payload: TriageRequest) -> dict:
        outcome = await triage_workflow.run(payload.ticket)
        return {
            "ticket_id": outcome.triage.ticket_id,
            "category": outcome.triage.category,
            "priority": outcome.triage.priority,
            "summary": outcome.triage.summary,
            "specialist": outcome.response.specialist,
            "output": outcome.output,
        }

    @app.post("/api/support/{customer_id}/messages")
    async def support_message(customer_id: str, payload: SupportMessageRequest) -> dict:
        with bound_contextvars(customer_id=customer_id):
            reply = await support_desk.handle_message(customer_id, payload.text)
        return {
            "customer_id": reply.customer_id,
            "status": reply.status,
            "message": reply.message,
            "agent_type": reply.agent_type,
            "agent_name": reply.agent_name,
            "previous_agent": reply.previous_agent,
            "topic_changed": reply.topic_changed,
            "triage": reply.triage.model_dump(mode="json") if reply.triage else None,
            "ticket_id": reply.ticket.ticket_id if reply.ticket else None,
        }

    @app.delete("/api/support/{customer_id}")
    async def reset_support(customer_id: str) -> JSONResponse:
        await support_desk.reset(customer_id)
        return JSONResponse({"status": "ok"})

    @app.post("/api/loans/applications")
    async def loan_application(payload: LoanApplicationRequest) -> dict:
        outcome = await loans.run(payload.application)
        return {
            "application_id": outcome.application_id,
            "decision": outcome.decision,
            "stages": [{"agent": s.agent, "output": s.output} for s in outcome.stages],
            "output": outcome.output,
        }

    @app.post("/api/banking/{customer_id}/messages")
    async def banking_message(customer_id: str, payload: SupportMessageRequest) -> dict:
        with bound_contextvars(customer_id=customer_id):
            reply = await banking_desk.handle_message(customer_id, payload.text)
        return {
            "customer_id": reply.customer_id,
            "message": reply.message,
            "handled_by": reply.handled_by,
            "handoffs": reply.handoffs,
        }

    @app.delete("/api/banking/{customer_id}")
    async def reset_banking(customer_id: str) -> JSONResponse:
        await banking_desk.reset(customer_id)
        return JSONResponse({"status": "ok"})

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint."""
        return {
            "status": "ok",
            "model": settings.llm_model,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
