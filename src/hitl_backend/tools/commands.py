from __future__ import annotations

from google.adk.tools import FunctionTool

from ..logging import get_logger

logger = get_logger(__name__)


def execute_command(command: str, description: str) -> str:
    """
    Execute a command or task. This requires user approval before execution.

    Args:
        command: The command or task to execute
        description: Description of what this command will do
    """
    # Simulated; the demo never touches the host.
    logger.info("command_executed", command=command)
    return f"Successfully executed: {command}\nResult: Task completed - {description}"


def build_command_tool() -> FunctionTool:
    return FunctionTool(execute_command, require_confirmation=True)
