"""Tests for herald.tools.dispatcher."""

from __future__ import annotations

import logging

import pytest

from herald.connectors.base import Connectors
from herald.core.response import ToolResult
from herald.tools.dispatcher import Dispatcher
from herald.tools.handlers import HANDLERS


@pytest.fixture
def dispatcher(connectors) -> Dispatcher:
    return Dispatcher(connectors)


class TestConstruction:
    def test_every_tool_needs_a_handler(self, connectors):
        handlers = dict(HANDLERS)
        del handlers["sync_to_supabase"]
        with pytest.raises(ValueError, match="sync_to_supabase"):
            Dispatcher(connectors, handlers=handlers)


class TestExecute:
    async def test_success_envelope(self, dispatcher):
        result = await dispatcher.execute("send_discord_message", {"channel_id": "C1", "message": "hi"})

        assert isinstance(result, ToolResult)
        assert result.success is True
        assert result.result["message_id"] == "M1"
        assert result.error is None

    async def test_unknown_tool(self, dispatcher, chat, datastore):
        result = await dispatcher.execute("unknown_tool", {})

        assert result.success is False
        assert "Unknown tool" in result.error
        assert chat.call_count == 0
        assert datastore.call_count == 0

    @pytest.mark.parametrize("tool_name", [None, 5, ["send_discord_message"]])
    async def test_non_string_tool_name_is_unknown(self, dispatcher, chat, tool_name):
        result = await dispatcher.execute(tool_name, {})

        assert result.success is False
        assert result.error == f"Unknown tool: {tool_name}"
        assert chat.call_count == 0

    async def test_missing_required_parameter(self, dispatcher, chat):
        result = await dispatcher.execute("send_discord_message", {"channel_id": "C1"})

        assert result.success is False
        assert result.error == "Missing required parameter(s) for send_discord_message: message"
        assert chat.call_count == 0

    async def test_none_parameters_treated_as_empty(self, dispatcher):
        result = await dispatcher.execute("get_discord_channels", None)
        assert result.success is True
        assert result.result["count"] == 2

    async def test_non_object_parameters_rejected(self, dispatcher):
        result = await dispatcher.execute("get_discord_channels", ["G1"])
        assert result.success is False
        assert "parameters must be an object" in result.error

    async def test_unknown_parameters_passed_through(self, connectors):
        seen = {}

        async def capture(conns, params):
            seen.update(params)
            return {"ok": True}

        handlers = {**HANDLERS, "get_discord_channels": capture}
        dispatcher = Dispatcher(connectors, handlers=handlers)

        result = await dispatcher.execute("get_discord_channels", {"extra": 1})
        assert result.success is True
        assert seen == {"extra": 1}

    async def test_not_ready(self, chat_factory):
        dispatcher = Dispatcher(Connectors(chat=chat_factory(ready=False)))
        result = await dispatcher.execute("get_discord_channels", {})
        assert result.success is False
        assert "not connected" in result.error

    async def test_handler_error_becomes_failure(self, dispatcher):
        result = await dispatcher.execute(
            "manage_discord_roles", {"user_id": "U9", "role_id": "R1", "action": "add"}
        )
        assert result.to_dict() == {"success": False, "error": "User U9 not found"}

    async def test_unexpected_exception_is_contained(self, connectors, caplog):
        async def boom(conns, params):
            raise RuntimeError("socket exploded")

        dispatcher = Dispatcher(connectors, handlers={**HANDLERS, "get_discord_channels": boom})

        with caplog.at_level(logging.ERROR, logger="herald.tools.dispatcher"):
            result = await dispatcher.execute("get_discord_channels", {})

        assert result.success is False
        assert result.error == "socket exploded"
        assert "Unexpected error in tool get_discord_channels" in caplog.text

    async def test_exception_without_message_uses_type_name(self, connectors):
        async def boom(conns, params):
            raise KeyError()

        dispatcher = Dispatcher(connectors, handlers={**HANDLERS, "get_discord_channels": boom})
        result = await dispatcher.execute("get_discord_channels", {})
        assert result.error == "KeyError"

    async def test_logs_call_and_result(self, dispatcher, caplog):
        with caplog.at_level(logging.INFO, logger="herald.tools"):
            await dispatcher.execute("get_discord_channels", {})

        assert "Executing tool: get_discord_channels" in caplog.text
        assert "Tool get_discord_channels succeeded in" in caplog.text
        finished = caplog.records[-1]
        assert finished.tool == "get_discord_channels"
        assert finished.success is True

    async def test_sync_through_dispatcher(self, dispatcher, datastore):
        result = await dispatcher.execute(
            "sync_to_supabase", {"data_type": "user", "client_id": "acme", "data": {"name": "x"}}
        )
        assert result.result["table"] == "acme_discord_user"
        assert "acme_discord_user" in datastore.rows
