"""
Supabase Source — Contact documents read through the managed SDK client.

Rows arrive as native dicts, so the row itself is the field mapping and
the normalizer's tagged-value decoding passes them through unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from supabase import AsyncClient, acreate_client

from portal.config import settings
from portal.models.contact import RawDocument
from portal.services.dashboard.errors import ContactSourceError, ContactSourceTimeout

logger = logging.getLogger(__name__)

_client: AsyncClient | None = None


async def get_supabase_client() -> AsyncClient:
    """Shared async client, created on first use from the configured project."""
    global _client
    if _client is None:
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ContactSourceError(
                "CONTACT_BACKEND=supabase needs SUPABASE_URL and SUPABASE_SERVICE_KEY"
            )
        _client = await acreate_client(
            settings.supabase_url, settings.supabase_service_key
        )
        logger.info("Supabase client ready for table %s", settings.supabase_contacts_table)
    return _client


async def close_supabase_client() -> None:
    global _client
    _client = None


def _to_raw_document(row: dict[str, Any]) -> RawDocument:
    return RawDocument(
        name=str(row.get("id") or ""),
        fields=row,
        create_time=row.get("created_at"),
        update_time=row.get("updated_at"),
    )


class SupabaseSource:
    """Contact source backed by a Supabase table."""

    def __init__(self, table: str, *, timeout: float = 10.0) -> None:
        self.table = table
        self.timeout = timeout

    async def list_documents(self) -> list[RawDocument]:
        try:
            sb = await get_supabase_client()
            result = await asyncio.wait_for(
                sb.table(self.table).select("*").execute(), timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            raise ContactSourceTimeout("Timed out fetching contacts") from e
        except ContactSourceError:
            raise
        except Exception as e:
            logger.exception("Supabase: failed to list contacts")
            raise ContactSourceError("Failed to fetch contacts") from e

        rows: list[dict[str, Any]] = result.data or []
        logger.info("Fetched %d contact rows", len(rows))
        return [_to_raw_document(row) for row in rows]

    async def get_document(self, doc_id: str) -> RawDocument | None:
        try:
            sb = await get_supabase_client()
            result = await asyncio.wait_for(
                sb.table(self.table).select("*").eq("id", doc_id).limit(1).execute(),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ContactSourceTimeout("Timed out fetching contact") from e
        except ContactSourceError:
            raise
        except Exception as e:
            logger.exception("Supabase: failed to fetch contact")
            raise ContactSourceError("Failed to fetch contact") from e

        rows: list[dict[str, Any]] = result.data or []
        return _to_raw_document(rows[0]) if rows else None
