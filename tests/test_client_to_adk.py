"""Tests for client chat history -> ADK contents conversion."""

from __future__ import annotations

import pytest

from hitl_backend.adapters.client_to_adk import build_user_content, to_adk_contents
from hitl_backend.errors import ProtocolError


def test_build_user_content() -> None:
    content = build_user_content("hello")

    assert content.role == "user"
    assert content.parts[0].text == "hello"


class TestToAdkContents:
    def test_roles_map_to_adk_roles(self) -> None:
        contents = to_adk_contents(
            [
                {"role": "user", "content": "back up db1"},
                {"role": "assistant", "content": "On it."},
            ]
        )

        assert [c.role for c in contents] == ["user", "model"]
        assert contents[1].parts[0].text == "On it."

    def test_text_parts_list_is_joined(self) -> None:
        [content] = to_adk_contents(
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "content": "Hello "},
                        {"type": "image", "content": "ignored"},
                        {"type": "text", "content": "world"},
                    ],
                }
            ]
        )

        assert content.parts[0].text == "Hello world"

    def test_assistant_tool_calls_and_tool_results(self) -> None:
        contents = to_adk_contents(
            [
                {"role": "user", "content": "run ls"},
                {
                    "role": "assistant",
                    "content": "",
                    "toolCalls": [
                        {
                            "id": "c1",
                            "type": "function",
                            "function": {
                                "name": "request_approval",
                                "arguments": '{"request": {"approval_id": "a1"}}',
                            },
                        }
                    ],
                },
                {"role": "tool", "toolCallId": "c1", "content": '{"approved": true}'},
            ]
        )

        assistant = contents[1]
        assert len(assistant.parts) == 1
        call = assistant.parts[0].function_call
        assert call.id == "c1"
        assert call.name == "request_approval"
        assert call.args == {"request": {"approval_id": "a1"}}

        tool = contents[2]
        assert tool.role == "user"
        response = tool.parts[0].function_response
        assert response.id == "c1"
        assert response.name == "request_approval"
        assert response.response == {"output": '{"approved": true}'}

    def test_dict_arguments_are_accepted(self) -> None:
        [content] = to_adk_contents(
            [
                {
                    "role": "assistant",
                    "toolCalls": [
                        {"id": "c1", "function": {"name": "lookup", "arguments": {"q": "x"}}}
                    ],
                }
            ]
        )

        assert content.parts[0].function_call.args == {"q": "x"}

    def test_missing_arguments_default_to_empty_object(self) -> None:
        [content] = to_adk_contents(
            [{"role": "assistant", "toolCalls": [{"id": "c1", "function": {"name": "ping"}}]}]
        )

        assert content.parts[0].function_call.args == {}

    def test_tool_result_for_unknown_call_has_no_name(self) -> None:
        [content] = to_adk_contents([{"role": "tool", "toolCallId": "x", "content": "42"}])

        assert content.parts[0].function_response.name is None

    @pytest.mark.parametrize(
        "messages",
        [
            [{"role": "system", "content": "hi"}],
            ["not an object"],
            [{"role": "tool", "content": "42"}],
            [{"role": "assistant", "toolCalls": [{"id": "c1", "function": {}}]}],
            [{"role": "assistant", "toolCalls": ["c1"]}],
            [
                {
                    "role": "assistant",
                    "toolCalls": [{"id": "c1", "function": {"name": "f", "arguments": "{bad"}}],
                }
            ],
            [
                {
                    "role": "assistant",
                    "toolCalls": [{"id": "c1", "function": {"name": "f", "arguments": "[1, 2]"}}],
                }
            ],
        ],
    )
    def test_invalid_messages_raise(self, messages: list) -> None:
        with pytest.raises(ProtocolError):
            to_adk_contents(messages)
