"""
Translate between ADK tool confirmations and the client `request_approval` tool.

ADK pauses a tool that was registered with ``require_confirmation=True`` by
emitting an ``adk_request_confirmation`` function call, and resumes it when a
function response with the same id carries ``{"confirmed": bool}``. Generic
tool-calling UIs know nothing about that, so on the way out each confirmation
call is rewritten as a ``request_approval`` tool call whose single ``request``
argument is an ``ApprovalRequest``. On the way in the client's
``request_approval`` calls and their tool results are rewritten back into the
native confirmation call/response pair.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from google.adk.events.event import Event
from google.adk.flows.llm_flows.functions import REQUEST_CONFIRMATION_FUNCTION_CALL_NAME
from google.genai import types
from pydantic import BaseModel, ValidationError

from ..domain.models import ApprovalRequest, ApprovalResponse
from ..errors import ProtocolError
from ..logging import get_logger

REQUEST_APPROVAL_TOOL_NAME = "request_approval"
REQUEST_ARGUMENT = "request"

# Keys a client may wrap a tool result in before it reaches us.
_RESULT_ENVELOPE_KEYS = ("output", "result", "response")

M = TypeVar("M", bound=BaseModel)

logger = get_logger(__name__)


def translate_incoming_messages(
    messages: Sequence[types.Content],
) -> list[types.Content]:
    """Rewrite client approval tool calls/results into ADK confirmations.

    The returned list has the same length and order as ``messages``. Messages
    without approval traffic are returned as the same objects.

    Raises:
        ProtocolError: a ``request_approval`` call or its tool result is
            malformed. Nothing is returned in that case.
    """
    pending: dict[str, ApprovalRequest] = {}
    result: list[types.Content] = []

    for message in messages:
        parts = message.parts or []
        new_parts: list[types.Part] | None = None

        for index, part in enumerate(parts):
            replacement = _translate_incoming_part(part, pending)
            if replacement is None:
                if new_parts is not None:
                    new_parts.append(part)
                continue
            if new_parts is None:
                new_parts = list(parts[:index])
            new_parts.append(replacement)

        if new_parts is None:
            result.append(message)
        else:
            result.append(message.model_copy(update={"parts": new_parts}))

    return result


def translate_outgoing_event(event: Event) -> Event:
    """Rewrite ADK confirmation requests in one streamed event as `request_approval` calls.

    Raises:
        ProtocolError: a confirmation request lacks its id or the original
            function call it asks about.
    """
    content = event.content
    if content is None or not content.parts:
        return event

    new_parts: list[types.Part] | None = None
    for index, part in enumerate(content.parts):
        call = part.function_call
        if call is None or call.name != REQUEST_CONFIRMATION_FUNCTION_CALL_NAME:
            continue
        if new_parts is None:
            new_parts = list(content.parts)
        new_parts[index] = _confirmation_to_tool_call(call)

    if new_parts is None:
        return event

    return event.model_copy(
        update={"content": content.model_copy(update={"parts": new_parts})}
    )


def decode_approval_request(value: Any) -> ApprovalRequest:
    return _decode_model(ApprovalRequest, value, what="approval request")


def decode_approval_response(payload: Any) -> ApprovalResponse:
    """Decode a tool-result payload (mapping, JSON text, or enveloped) into a decision."""
    return _decode_model(ApprovalResponse, _unwrap_result(payload), what="approval response")


def _translate_incoming_part(
    part: types.Part, pending: dict[str, ApprovalRequest]
) -> types.Part | None:
    call = part.function_call
    if call is not None and call.name == REQUEST_APPROVAL_TOOL_NAME:
        args = call.args or {}
        if REQUEST_ARGUMENT not in args:
            raise ProtocolError(
                f"{REQUEST_APPROVAL_TOOL_NAME} call {call.id!r} has no "
                f"'{REQUEST_ARGUMENT}' argument"
            )
        request = decode_approval_request(args[REQUEST_ARGUMENT])
        if call.id:
            pending[call.id] = request
        return types.Part(function_call=_native_confirmation_call(request))

    response = part.function_response
    if response is None:
        return None

    request = pending.get(response.id) if response.id else None
    if request is None:
        if _looks_like_decision(response.response):
            logger.warning(
                "unmatched_approval_response",
                tool_call_id=response.id,
            )
        return None

    decision = decode_approval_response(response.response)
    if decision.approval_id != request.approval_id:
        logger.warning(
            "approval_id_mismatch",
            tool_call_id=response.id,
            expected=request.approval_id,
            received=decision.approval_id,
        )
    return types.Part(
        function_response=types.FunctionResponse(
            id=request.approval_id,
            name=REQUEST_CONFIRMATION_FUNCTION_CALL_NAME,
            response={"confirmed": decision.approved},
        )
    )


def _native_confirmation_call(request: ApprovalRequest) -> types.FunctionCall:
    return types.FunctionCall(
        id=request.approval_id,
        name=REQUEST_CONFIRMATION_FUNCTION_CALL_NAME,
        args={
            "originalFunctionCall": {
                "id": request.approval_id,
                "name": request.function_name,
                "args": request.function_arguments or {},
            },
            "toolConfirmation": {
                "hint": request.message or "",
                "confirmed": False,
            },
        },
    )


def _confirmation_to_tool_call(call: types.FunctionCall) -> types.Part:
    original = (call.args or {}).get("originalFunctionCall")
    if not call.id or not isinstance(original, Mapping) or not original.get("name"):
        raise ProtocolError(
            f"{REQUEST_CONFIRMATION_FUNCTION_CALL_NAME} call {call.id!r} has no "
            "original function call"
        )
    request = ApprovalRequest.for_call(
        approval_id=call.id,
        function_name=original["name"],
        function_arguments=original.get("args"),
    )
    return types.Part(
        function_call=types.FunctionCall(
            id=call.id,
            name=REQUEST_APPROVAL_TOOL_NAME,
            args={REQUEST_ARGUMENT: request.model_dump()},
        )
    )


def _unwrap_result(payload: Any) -> Any:
    if isinstance(payload, Mapping) and "approved" not in payload:
        keys = [key for key in _RESULT_ENVELOPE_KEYS if key in payload]
        if len(keys) == 1:
            return payload[keys[0]]
    return payload


def _looks_like_decision(payload: Any) -> bool:
    value = _unwrap_result(payload)
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return False
    return isinstance(value, Mapping) and "approved" in value


def _decode_model(model: type[M], value: Any, *, what: str) -> M:
    try:
        if isinstance(value, (str, bytes)):
            return model.model_validate_json(value)
        if isinstance(value, Mapping):
            return model.model_validate(dict(value))
    except ValidationError as exc:
        raise ProtocolError(f"Malformed {what}: {exc}") from exc
    raise ProtocolError(f"Malformed {what}: expected an object, got {type(value).__name__}")
