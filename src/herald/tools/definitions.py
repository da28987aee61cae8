# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Tool definitions exposed by the gateway.

The list is fixed at import time. Order matters: it is the order clients see
in ``GET /tools`` and in the ``tools_available`` stream frame.
"""

from __future__ import annotations

from mcp.types import Tool

SEND_DISCORD_MESSAGE = "send_discord_message"
GET_DISCORD_CHANNELS = "get_discord_channels"
GET_DISCORD_MESSAGES = "get_discord_messages"
MANAGE_DISCORD_ROLES = "manage_discord_roles"
SYNC_TO_SUPABASE = "sync_to_supabase"

ROLE_ACTIONS = ("add", "remove")
SYNC_DATA_TYPES = ("user", "message", "event")

GATEWAY_TOOLS: tuple[Tool, ...] = (
    Tool(
        name=SEND_DISCORD_MESSAGE,
        description="Send a message to a Discord channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "Discord channel ID"},
                "message": {"type": "string", "description": "Message content to send"},
                "embed": {"type": "object", "description": "Optional embed object"},
            },
            "required": ["channel_id", "message"],
        },
    ),
    Tool(
        name=GET_DISCORD_CHANNELS,
        description="List available Discord channels",
        inputSchema={
            "type": "object",
            "properties": {
                "guild_id": {"type": "string", "description": "Discord server ID (optional)"},
            },
        },
    ),
    Tool(
        name=GET_DISCORD_MESSAGES,
        description="Get recent messages from a Discord channel",
        inputSchema={
            "type": "object",
            "properties": {
                "channel_id": {"type": "string", "description": "Discord channel ID"},
                "limit": {
                    "type": "number",
                    "description": "Number of messages (default: 10, max: 100)",
                },
            },
            "required": ["channel_id"],
        },
    ),
    Tool(
        name=MANAGE_DISCORD_ROLES,
        description="Add or remove roles from Discord users",
        inputSchema={
            "type": "object",
            "properties": {
                "user_id": {"type": "string", "description": "Discord user ID"},
                "role_id": {"type": "string", "description": "Discord role ID"},
                "action": {"type": "string", "enum": list(ROLE_ACTIONS)},
            },
            "required": ["user_id", "role_id", "action"],
        },
    ),
    Tool(
        name=SYNC_TO_SUPABASE,
        description="Sync Discord data to Supabase database",
        inputSchema={
            "type": "object",
            "properties": {
                "data_type": {"type": "string", "enum": list(SYNC_DATA_TYPES)},
                "data": {"type": "object", "description": "Data to sync"},
                "client_id": {"type": "string", "description": "Client ID for partitioning"},
            },
            "required": ["data_type", "data", "client_id"],
        },
    ),
)
