# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Connector adapters for the chat platform and the data store."""

from .base import (
    ChannelInfo,
    ChatMessage,
    ChatPlatform,
    Connectors,
    DataStore,
    GuildInfo,
    MessageAuthor,
    PostedMessage,
)
from .readiness import ReadinessCell

__all__ = [
    "ChannelInfo",
    "ChatMessage",
    "ChatPlatform",
    "Connectors",
    "DataStore",
    "GuildInfo",
    "MessageAuthor",
    "PostedMessage",
    "ReadinessCell",
]
