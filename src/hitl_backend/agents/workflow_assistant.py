"""
ADK agent definition for the human-in-the-loop workflow assistant.
"""

from __future__ import annotations

from google.adk.agents import LlmAgent
from google.adk.apps.app import App, ResumabilityConfig
from google.adk.runners import Runner
from google.adk.sessions.base_session_service import BaseSessionService
from google.adk.sessions.in_memory_session_service import InMemorySessionService

from ..settings import Settings
from ..tools import build_tools

AGENT_NAME = "WorkflowAssistant"

INSTRUCTION = """\
You are a helpful workflow assistant that can execute tasks and commands for the user.
When the user asks you to perform an action or execute a task, use the execute_command tool.
Always explain what you're about to do before requesting approval.
Be helpful and provide clear descriptions of what each command will accomplish.
"""


def build_agent(settings: Settings) -> LlmAgent:
    return LlmAgent(
        name=AGENT_NAME,
        model=settings.llm_model,
        description="Workflow assistant whose commands need user approval",
        instruction=INSTRUCTION,
        tools=build_tools(),
    )


def build_app(settings: Settings) -> App:
    # Confirmation decisions resume the invocation that paused for them
    return App(
        name=settings.adk_app_name,
        root_agent=build_agent(settings),
        resumability_config=ResumabilityConfig(is_resumable=True),
    )


def create_runner(
    *, settings: Settings, session_service: BaseSessionService | None = None
) -> Runner:
    app = build_app(settings)
    if session_service is None:
        session_service = InMemorySessionService()
    return Runner(app=app, session_service=session_service)
