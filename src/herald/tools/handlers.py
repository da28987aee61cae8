# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Tool implementations.

Each handler takes the connector capability object and the raw parameter
mapping, extracts and checks its own fields, and returns a JSON-ready dict.
Failures are raised as ``HeraldException`` subclasses.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from ..connectors.base import ChatPlatform, Connectors, GuildInfo
from ..core.exceptions import (
    ConnectorNotReadyError,
    NotConfiguredError,
    NotFoundException,
    ValidationException,
)
from ..core.timestamps import isoformat, utc_now
from .definitions import (
    GET_DISCORD_CHANNELS,
    GET_DISCORD_MESSAGES,
    MANAGE_DISCORD_ROLES,
    ROLE_ACTIONS,
    SEND_DISCORD_MESSAGE,
    SYNC_DATA_TYPES,
    SYNC_TO_SUPABASE,
)

logger = logging.getLogger(__name__)

PLATFORM = "discord"
DEFAULT_MESSAGE_LIMIT = 10
MAX_MESSAGE_LIMIT = 100

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")

Handler = Callable[[Connectors, dict[str, Any]], Awaitable[dict[str, Any]]]


# ============================================================================
# Parameter helpers
# ============================================================================


def _id_param(params: dict[str, Any], key: str) -> str:
    """Read a Discord-style ID, accepting strings or integers."""
    value = params.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int)) or value == "":
        raise ValidationException(f"{key} must be a non-empty string", field=key, value=value)
    return str(value)


def _str_param(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str):
        raise ValidationException(f"{key} must be a string", field=key, value=value)
    return value


def _limit_param(params: dict[str, Any]) -> int:
    """Message count, defaulting to 10 and clamped to 1..100."""
    value = params.get("limit")
    if value is None:
        return DEFAULT_MESSAGE_LIMIT
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != int(value):
        raise ValidationException("limit must be an integer", field="limit", value=value)
    return max(1, min(int(value), MAX_MESSAGE_LIMIT))


def _ready_chat(connectors: Connectors) -> ChatPlatform:
    if connectors.chat is None or not connectors.chat.readiness.is_ready:
        raise ConnectorNotReadyError()
    return connectors.chat


def _first_guild(chat: ChatPlatform) -> GuildInfo:
    guilds = chat.guilds()
    if not guilds:
        raise NotFoundException("Guild", message="No Discord server found")
    return guilds[0]


def collection_name(client_id: str, data_type: str) -> str:
    """Target collection for a synced record: ``{client_id}_discord_{data_type}``."""
    return f"{client_id}_{PLATFORM}_{data_type}"


# ============================================================================
# Handlers
# ============================================================================


async def send_discord_message(connectors: Connectors, params: dict[str, Any]) -> dict[str, Any]:
    chat = _ready_chat(connectors)
    channel_id = _id_param(params, "channel_id")
    message = _str_param(params, "message")

    embed = params.get("embed")
    if embed is not None and not isinstance(embed, dict):
        raise ValidationException("embed must be an object", field="embed")

    sent = await chat.send_message(channel_id, message, embed)
    if sent is None:
        raise NotFoundException("Channel", channel_id)

    return {
        "message_id": sent.id,
        "channel_id": channel_id,
        "content": message,
        "timestamp": isoformat(sent.created_at),
        "status": "sent",
    }


async def get_discord_channels(connectors: Connectors, params: dict[str, Any]) -> dict[str, Any]:
    """List text channels of a guild.

    ``guild_id`` only matters when the bot is in more than one guild; with a
    single guild that guild is always used.
    """
    chat = _ready_chat(connectors)
    guilds = chat.guilds()
    if not guilds:
        raise NotFoundException("Guild", message="No Discord server found")

    guild = guilds[0]
    if len(guilds) > 1 and params.get("guild_id") is not None:
        guild_id = _id_param(params, "guild_id")
        matches = [g for g in guilds if g.id == guild_id]
        if not matches:
            raise NotFoundException("Guild", guild_id)
        guild = matches[0]

    channels = [
        {
            "id": channel.id,
            "name": channel.name,
            "type": "text",
            "position": channel.position,
        }
        for channel in guild.text_channels
    ]

    return {
        "guild_id": guild.id,
        "guild_name": guild.name,
        "channels": channels,
        "count": len(channels),
    }


async def get_discord_messages(connectors: Connectors, params: dict[str, Any]) -> dict[str, Any]:
    chat = _ready_chat(connectors)
    channel_id = _id_param(params, "channel_id")
    limit = _limit_param(params)

    history = await chat.fetch_messages(channel_id, limit)
    if history is None:
        raise NotFoundException("Channel", channel_id)

    messages = [
        {
            "id": msg.id,
            "content": msg.content,
            "author": {
                "id": msg.author.id,
                "username": msg.author.username,
                "display_name": msg.author.display_name,
            },
            "timestamp": isoformat(msg.created_at),
            "attachments": msg.attachment_count,
        }
        for msg in history
    ]

    return {
        "channel_id": channel_id,
        "messages": messages,
        "count": len(messages),
    }


async def manage_discord_roles(connectors: Connectors, params: dict[str, Any]) -> dict[str, Any]:
    chat = _ready_chat(connectors)
    user_id = _id_param(params, "user_id")
    role_id = _id_param(params, "role_id")

    action = params.get("action")
    if action not in ROLE_ACTIONS:
        raise ValidationException(
            f"Invalid action {action!r}: expected 'add' or 'remove'",
            field="action",
            value=action,
        )

    guild = _first_guild(chat)
    if not await chat.member_exists(guild.id, user_id):
        raise NotFoundException("User", user_id)
    if not await chat.role_exists(guild.id, role_id):
        raise NotFoundException("Role", role_id)

    if action == "add":
        await chat.add_role(guild.id, user_id, role_id)
    else:
        await chat.remove_role(guild.id, user_id, role_id)

    logger.info(f"Role {role_id} {action} for user {user_id} in guild {guild.id}")

    return {
        "user_id": user_id,
        "role_id": role_id,
        "action": action,
        "status": "completed",
    }


async def sync_to_supabase(connectors: Connectors, params: dict[str, Any]) -> dict[str, Any]:
    if connectors.datastore is None:
        raise NotConfiguredError("Supabase")

    data_type = params.get("data_type")
    if data_type not in SYNC_DATA_TYPES:
        raise ValidationException(
            f"Invalid data_type {data_type!r}: expected one of {', '.join(SYNC_DATA_TYPES)}",
            field="data_type",
            value=data_type,
        )

    client_id = _str_param(params, "client_id")
    if not _CLIENT_ID_PATTERN.fullmatch(client_id):
        raise ValidationException(
            "client_id may only contain letters, digits, '_' and '-'",
            field="client_id",
            value=client_id,
        )

    data = params.get("data")
    if not isinstance(data, dict):
        raise ValidationException("data must be an object", field="data")

    table = collection_name(client_id, data_type)
    await connectors.datastore.insert(table, {**data, "synced_at": utc_now()})

    return {
        "synced": True,
        "table": table,
        "client_id": client_id,
        "data_type": data_type,
    }


HANDLERS: dict[str, Handler] = {
    SEND_DISCORD_MESSAGE: send_discord_message,
    GET_DISCORD_CHANNELS: get_discord_channels,
    GET_DISCORD_MESSAGES: get_discord_messages,
    MANAGE_DISCORD_ROLES: manage_discord_roles,
    SYNC_TO_SUPABASE: sync_to_supabase,
}
