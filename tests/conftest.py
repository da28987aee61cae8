"""Global test fixtures for the Herald test suite."""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import Any

import pytest

from herald.connectors.base import (
    ChannelInfo,
    ChatMessage,
    Connectors,
    GuildInfo,
    MessageAuthor,
    PostedMessage,
)
from herald.connectors.readiness import ReadinessCell
from herald.core.exceptions import DownstreamException

TEST_SECRET = "test-shared-secret-0123456789"


# ============================================================================
# Connector doubles
# ============================================================================


class FakeChatPlatform:
    """In-memory ChatPlatform that records every call."""

    def __init__(self, ready: bool = True, guilds: list[GuildInfo] | None = None):
        self.readiness = ReadinessCell("fake-discord")
        if ready:
            self.readiness.publish(True, "test")

        if guilds is None:
            guilds = [
                GuildInfo(
                    id="G1",
                    name="Fresh House",
                    text_channels=[
                        ChannelInfo(id="C1", name="general", position=0),
                        ChannelInfo(id="C2", name="announcements", position=1),
                    ],
                )
            ]
        self._guilds = guilds
        self.history: dict[str, list[ChatMessage]] = {"C1": [], "C2": []}
        self.members: set[str] = {"U1"}
        self.roles: set[str] = {"R1"}
        self.role_assignments: set[tuple[str, str]] = set()
        self.sent: list[dict[str, Any]] = []
        self.next_message_id = "M1"
        self.sent_at = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)
        self.reject_sends = False
        self.closed = False
        self.calls: list[tuple[Any, ...]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def set_ready(self, ready: bool) -> None:
        self.readiness.publish(ready, "test")

    def guilds(self) -> list[GuildInfo]:
        self.calls.append(("guilds",))
        return list(self._guilds)

    async def send_message(self, channel_id: str, content: str, embed: dict[str, Any] | None = None):
        self.calls.append(("send_message", channel_id, content, embed))
        if channel_id not in self.history:
            return None
        if self.reject_sends:
            raise DownstreamException("Discord rejected the request: Missing Permissions", status=403)
        self.sent.append({"channel_id": channel_id, "content": content, "embed": embed})
        return PostedMessage(id=self.next_message_id, created_at=self.sent_at)

    async def fetch_messages(self, channel_id: str, limit: int):
        self.calls.append(("fetch_messages", channel_id, limit))
        if channel_id not in self.history:
            return None
        return self.history[channel_id][:limit]

    async def member_exists(self, guild_id: str, user_id: str) -> bool:
        self.calls.append(("member_exists", guild_id, user_id))
        return user_id in self.members

    async def role_exists(self, guild_id: str, role_id: str) -> bool:
        self.calls.append(("role_exists", guild_id, role_id))
        return role_id in self.roles

    async def add_role(self, guild_id: str, user_id: str, role_id: str) -> None:
        self.calls.append(("add_role", guild_id, user_id, role_id))
        self.role_assignments.add((user_id, role_id))

    async def remove_role(self, guild_id: str, user_id: str, role_id: str) -> None:
        self.calls.append(("remove_role", guild_id, user_id, role_id))
        self.role_assignments.discard((user_id, role_id))

    async def close(self) -> None:
        self.closed = True
        self.readiness.publish(False, "closed")


class FakeDataStore:
    """In-memory DataStore keyed by collection name."""

    def __init__(self):
        self.rows: dict[str, list[dict[str, Any]]] = {}
        self.reject_with: str | None = None
        self.calls: list[tuple[str, dict[str, Any]]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def insert(self, collection: str, record: dict[str, Any]) -> None:
        self.calls.append((collection, record))
        if self.reject_with is not None:
            raise DownstreamException(f"Supabase sync failed: {self.reject_with}")
        self.rows.setdefault(collection, []).append(record)


def make_message(message_id: str, content: str, minute: int = 0, attachments: int = 0) -> ChatMessage:
    return ChatMessage(
        id=message_id,
        content=content,
        author=MessageAuthor(id="U1", username="alice", display_name="Alice"),
        created_at=datetime(2026, 1, 1, 12, minute, tzinfo=UTC),
        attachment_count=attachments,
    )


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove gateway environment variables so settings come from the test."""
    names = ("DISCORD_BOT_TOKEN", "AUTH_TOKEN", "SUPABASE_URL", "SUPABASE_SERVICE_KEY", "PORT")
    for key in list(os.environ.keys()):
        if key.startswith("HERALD_") or key in names:
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def clean_settings():
    """Reset cached settings between tests."""
    import herald.core.config as config_module

    config_module._settings = None
    yield
    config_module._settings = None


# ============================================================================
# Connector Fixtures
# ============================================================================


@pytest.fixture
def chat() -> FakeChatPlatform:
    return FakeChatPlatform()


@pytest.fixture
def datastore() -> FakeDataStore:
    return FakeDataStore()


@pytest.fixture
def connectors(chat, datastore) -> Connectors:
    return Connectors(chat=chat, datastore=datastore)


@pytest.fixture
def settings():
    from herald.core.config import GatewaySettings

    return GatewaySettings(_env_file=None, auth_token=TEST_SECRET, heartbeat_interval=0.05)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_SECRET}"}


@pytest.fixture
def chat_factory():
    """Build extra FakeChatPlatform instances (e.g. not-ready or guild-less)."""
    return FakeChatPlatform


@pytest.fixture
def message_factory():
    return make_message
