"""Client chat message conversion to ADK types."""

from __future__ import annotations

import json
from typing import Any

from google.genai import types

from ..errors import ProtocolError


def build_user_content(text: str) -> types.Content:
    return types.Content(role="user", parts=[types.Part(text=text)])


def to_adk_contents(messages: list[dict[str, Any]]) -> list[types.Content]:
    """Convert the client's conversation history into ADK contents.

    Roles map as user -> user, assistant -> model, tool -> user (a function
    response). Tool results are wrapped as ``{"output": content}`` and named
    after the call they answer.

    Raises:
        ProtocolError: a message has an unknown role or a tool call carries
            arguments that are not a JSON object.
    """
    call_names: dict[str, str] = {}
    contents: list[types.Content] = []

    for message in messages:
        if not isinstance(message, dict):
            raise ProtocolError(f"Message must be an object, got {type(message).__name__}")
        role = message.get("role")

        if role == "user":
            contents.append(build_user_content(_text_of(message.get("content"))))

        elif role == "assistant":
            parts: list[types.Part] = []
            text = _text_of(message.get("content"))
            if text:
                parts.append(types.Part(text=text))
            for tool_call in message.get("toolCalls") or []:
                call = _parse_tool_call(tool_call)
                if call.id:
                    call_names[call.id] = call.name or ""
                parts.append(types.Part(function_call=call))
            contents.append(types.Content(role="model", parts=parts))

        elif role == "tool":
            tool_call_id = message.get("toolCallId")
            if not tool_call_id:
                raise ProtocolError("Tool message is missing toolCallId")
            response = types.FunctionResponse(
                id=tool_call_id,
                name=call_names.get(tool_call_id),
                response={"output": message.get("content")},
            )
            contents.append(
                types.Content(role="user", parts=[types.Part(function_response=response)])
            )

        else:
            raise ProtocolError(f"Unsupported message role: {role!r}")

    return contents


def _text_of(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part.get("content", "")
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        )
    return ""


def _parse_tool_call(tool_call: Any) -> types.FunctionCall:
    if not isinstance(tool_call, dict):
        raise ProtocolError("Tool call must be an object")
    function = tool_call.get("function") or {}
    name = function.get("name")
    if not name:
        raise ProtocolError(f"Tool call {tool_call.get('id')!r} has no function name")

    arguments = function.get("arguments")
    if arguments is None or arguments == "":
        args: Any = {}
    elif isinstance(arguments, str):
        try:
            args = json.loads(arguments)
        except json.JSONDecodeError as exc:
            raise ProtocolError(
                f"Tool call {tool_call.get('id')!r} arguments are not valid JSON"
            ) from exc
    else:
        args = arguments
    if not isinstance(args, dict):
        raise ProtocolError(f"Tool call {tool_call.get('id')!r} arguments must be an object")

    return types.FunctionCall(id=tool_call.get("id"), name=name, args=args)
