# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Herald Contributors

"""Supabase adapter for the data store capability."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from ..core.exceptions import DownstreamException

logger = logging.getLogger(__name__)


class SupabaseStore:
    """DataStore backed by a Supabase (PostgREST) project."""

    def __init__(self, client: AsyncClient):
        self.client = client

    @classmethod
    async def connect(cls, url: str, service_key: str) -> SupabaseStore:
        """Create the async Supabase client for ``url``."""
        client = await acreate_client(url, service_key)
        logger.info(f"Supabase client initialized for {url}")
        return cls(client)

    async def insert(self, collection: str, record: dict[str, Any]) -> None:
        try:
            await self.client.table(collection).insert(record).execute()
        except APIError as e:
            raise DownstreamException(f"Supabase sync failed: {e.message or e}") from e
        except httpx.HTTPError as e:
            raise DownstreamException(f"Supabase sync failed: {e}") from e
