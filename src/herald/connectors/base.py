# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Capability interfaces for the chat platform and the data store.

Handlers only talk to connectors through these protocols, so tests can swap in
in-memory doubles. Lookups that miss return ``None``; rejections raise
``DownstreamException``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from .readiness import ReadinessCell


@dataclass(frozen=True)
class ChannelInfo:
    """A text channel in a guild."""

    id: str
    name: str
    position: int


@dataclass(frozen=True)
class GuildInfo:
    """A guild (server) the bot belongs to."""

    id: str
    name: str
    text_channels: list[ChannelInfo] = field(default_factory=list)


@dataclass(frozen=True)
class PostedMessage:
    """Receipt for a message the bot sent."""

    id: str
    created_at: datetime


@dataclass(frozen=True)
class MessageAuthor:
    id: str
    username: str
    display_name: str


@dataclass(frozen=True)
class ChatMessage:
    """A message read from channel history."""

    id: str
    content: str
    author: MessageAuthor
    created_at: datetime
    attachment_count: int = 0


@runtime_checkable
class ChatPlatform(Protocol):
    """What the gateway needs from the chat platform."""

    readiness: ReadinessCell

    def guilds(self) -> list[GuildInfo]:
        """Guilds currently known to the client, in client order."""
        ...

    async def send_message(
        self,
        channel_id: str,
        content: str,
        embed: dict[str, Any] | None = None,
    ) -> PostedMessage | None:
        """Send to a channel. Returns None when the channel does not exist."""
        ...

    async def fetch_messages(self, channel_id: str, limit: int) -> list[ChatMessage] | None:
        """Most recent messages first. Returns None when the channel does not exist."""
        ...

    async def member_exists(self, guild_id: str, user_id: str) -> bool: ...

    async def role_exists(self, guild_id: str, role_id: str) -> bool: ...

    async def add_role(self, guild_id: str, user_id: str, role_id: str) -> None: ...

    async def remove_role(self, guild_id: str, user_id: str, role_id: str) -> None: ...

    async def close(self) -> None: ...


@runtime_checkable
class DataStore(Protocol):
    """What the gateway needs from the external data store."""

    async def insert(self, collection: str, record: dict[str, Any]) -> None:
        """Insert one record. Raises DownstreamException on rejection."""
        ...


class Connectors:
    """The capability object handed to the dispatcher and the session manager.

    Either connector may be None when it is not configured. The attributes are
    filled in once at startup and only read afterwards.
    """

    def __init__(self, chat: ChatPlatform | None = None, datastore: DataStore | None = None):
        self.chat = chat
        self.datastore = datastore

    def chat_ready(self) -> bool:
        """Read the chat platform's readiness at this instant."""
        return self.chat is not None and self.chat.readiness.is_ready

    def guild_count(self) -> int:
        if self.chat is None:
            return 0
        return len(self.chat.guilds())
