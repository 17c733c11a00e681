from __future__ import annotations

from google.adk.tools import FunctionTool

from .commands import build_command_tool, execute_command


def build_tools() -> list[FunctionTool]:
    tools: list[FunctionTool] = []
    tools.append(build_command_tool())
    return tools


__all__ = ["build_tools", "execute_command"]
