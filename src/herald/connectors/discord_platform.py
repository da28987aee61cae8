# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Discord adapter for the chat platform capability.

Wraps a discord.py client. Gateway events (ready, resumed, disconnect) are
published to a ReadinessCell; everything else is a thin translation between
discord.py objects and the value types in ``connectors.base``.
"""

from __future__ import annotations

import logging
from typing import Any

import discord

from ..core.exceptions import DownstreamException, NotFoundException
from .base import ChannelInfo, ChatMessage, GuildInfo, MessageAuthor, PostedMessage
from .readiness import ReadinessCell

logger = logging.getLogger(__name__)


def default_intents() -> discord.Intents:
    """Guilds, guild messages, message content and members."""
    intents = discord.Intents.default()
    intents.guilds = True
    intents.guild_messages = True
    intents.message_content = True
    intents.members = True
    return intents


def _snowflake(value: str | int) -> int | None:
    """Parse a Discord ID. Anything that is not a positive integer is None."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _rejected(exc: discord.HTTPException) -> DownstreamException:
    detail = exc.text or str(exc)
    return DownstreamException(f"Discord rejected the request: {detail}", status=exc.status)


class GatewayClient(discord.Client):
    """discord.Client that reports connection state to a ReadinessCell."""

    def __init__(self, readiness: ReadinessCell, **options: Any):
        options.setdefault("intents", default_intents())
        super().__init__(**options)
        self.readiness = readiness

    async def on_ready(self) -> None:
        logger.info(f"Discord bot logged in as {self.user}")
        logger.info(f"Connected to {len(self.guilds)} server(s)")
        self.readiness.publish(True, "ready")

    async def on_resumed(self) -> None:
        self.readiness.publish(True, "resumed")

    async def on_disconnect(self) -> None:
        self.readiness.publish(False, "gateway disconnected")

    async def on_error(self, event_method: str, /, *args: Any, **kwargs: Any) -> None:
        logger.exception(f"Discord client error in {event_method}")


class DiscordPlatform:
    """ChatPlatform backed by discord.py."""

    def __init__(self, client: discord.Client | None = None, readiness: ReadinessCell | None = None):
        self.readiness = readiness or ReadinessCell("discord")
        self.client = client if client is not None else GatewayClient(self.readiness)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self, token: str) -> None:
        """Log in and hold the gateway connection until closed.

        Login and connection failures are logged, not raised: the gateway keeps
        serving with every chat operation reporting not connected.
        """
        try:
            await self.client.start(token)
        except discord.LoginFailure as e:
            logger.error(f"Discord login failed: {e}")
        except Exception:  # Intentionally broad: top-level background task
            logger.exception("Discord client stopped unexpectedly")
        finally:
            self.readiness.publish(False, "client stopped")

    async def close(self) -> None:
        if not self.client.is_closed():
            await self.client.close()
        self.readiness.publish(False, "closed")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def guilds(self) -> list[GuildInfo]:
        return [
            GuildInfo(
                id=str(guild.id),
                name=guild.name,
                text_channels=[
                    ChannelInfo(id=str(channel.id), name=channel.name, position=channel.position)
                    for channel in guild.text_channels
                ],
            )
            for guild in self.client.guilds
        ]

    async def _channel(self, channel_id: str) -> discord.abc.Messageable | None:
        snowflake = _snowflake(channel_id)
        if snowflake is None:
            return None

        channel = self.client.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(snowflake)
            except discord.NotFound:
                return None
            except discord.HTTPException as e:
                raise _rejected(e) from e

        if not isinstance(channel, discord.abc.Messageable):
            return None
        return channel

    async def fetch_messages(self, channel_id: str, limit: int) -> list[ChatMessage] | None:
        channel = await self._channel(channel_id)
        if channel is None:
            return None

        try:
            history = [message async for message in channel.history(limit=limit)]
        except discord.HTTPException as e:
            raise _rejected(e) from e

        return [
            ChatMessage(
                id=str(message.id),
                content=message.content,
                author=MessageAuthor(
                    id=str(message.author.id),
                    username=message.author.name,
                    display_name=message.author.display_name,
                ),
                created_at=message.created_at,
                attachment_count=len(message.attachments),
            )
            for message in history
        ]

    def _guild(self, guild_id: str) -> discord.Guild | None:
        snowflake = _snowflake(guild_id)
        if snowflake is None:
            return None
        return self.client.get_guild(snowflake)

    async def _member(self, guild: discord.Guild, user_id: str) -> discord.Member | None:
        snowflake = _snowflake(user_id)
        if snowflake is None:
            return None
        member = guild.get_member(snowflake)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(snowflake)
        except discord.NotFound:
            return None
        except discord.HTTPException as e:
            raise _rejected(e) from e

    async def _role(self, guild: discord.Guild, role_id: str) -> discord.Role | None:
        snowflake = _snowflake(role_id)
        if snowflake is None:
            return None
        role = guild.get_role(snowflake)
        if role is not None:
            return role
        try:
            roles = await guild.fetch_roles()
        except discord.HTTPException as e:
            raise _rejected(e) from e
        return discord.utils.get(roles, id=snowflake)

    async def member_exists(self, guild_id: str, user_id: str) -> bool:
        guild = self._guild(guild_id)
        return guild is not None and await self._member(guild, user_id) is not None

    async def role_exists(self, guild_id: str, role_id: str) -> bool:
        guild = self._guild(guild_id)
        return guild is not None and await self._role(guild, role_id) is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def send_message(
        self,
        channel_id: str,
        content: str,
        embed: dict[str, Any] | None = None,
    ) -> PostedMessage | None:
        channel = await self._channel(channel_id)
        if channel is None:
            return None

        try:
            if embed:
                sent = await channel.send(content=content, embed=discord.Embed.from_dict(embed))
            else:
                sent = await channel.send(content)
        except discord.HTTPException as e:
            raise _rejected(e) from e

        return PostedMessage(id=str(sent.id), created_at=sent.created_at)

    async def _member_and_role(
        self, guild_id: str, user_id: str, role_id: str
    ) -> tuple[discord.Member, discord.Role]:
        guild = self._guild(guild_id)
        if guild is None:
            raise NotFoundException("Guild", guild_id)
        member = await self._member(guild, user_id)
        if member is None:
            raise NotFoundException("User", user_id)
        role = await self._role(guild, role_id)
        if role is None:
            raise NotFoundException("Role", role_id)
        return member, role

    async def add_role(self, guild_id: str, user_id: str, role_id: str) -> None:
        member, role = await self._member_and_role(guild_id, user_id, role_id)
        try:
            await member.add_roles(role)
        except discord.HTTPException as e:
            raise _rejected(e) from e

    async def remove_role(self, guild_id: str, user_id: str, role_id: str) -> None:
        member, role = await self._member_and_role(guild_id, user_id, role_id)
        try:
            await member.remove_roles(role)
        except discord.HTTPException as e:
            raise _rejected(e) from e
