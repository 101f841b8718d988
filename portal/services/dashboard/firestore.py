"""
Firestore REST Source — List and fetch contact documents over HTTP.

list_documents(): GET {base}/{collection}, following nextPageToken.
get_document():   GET {base}/{collection}/{id}, 404 → None.

Every request is bounded by the configured timeout; timeouts surface as
ContactSourceTimeout, everything else as ContactSourceError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from portal.models.contact import RawDocument
from portal.services.dashboard.errors import ContactSourceError, ContactSourceTimeout

logger = logging.getLogger(__name__)

_MAX_PAGES = 100


def _to_raw_document(doc: dict[str, Any]) -> RawDocument:
    return RawDocument(
        name=doc.get("name") or "",
        fields=doc.get("fields") or {},
        create_time=doc.get("createTime"),
        update_time=doc.get("updateTime"),
    )


class FirestoreRestSource:
    """Contact source reading a Firestore collection through the REST API."""

    def __init__(
        self,
        base_url: str,
        collection: str,
        *,
        api_key: str | None = None,
        page_size: int = 300,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.collection_url = f"{base_url.rstrip('/')}/{collection.strip('/')}"
        self.api_key = api_key
        self.page_size = page_size
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"Content-Type": "application/json"},
        )

    def _params(self, **extra: Any) -> dict[str, Any]:
        params: dict[str, Any] = {k: v for k, v in extra.items() if v is not None}
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def list_documents(self) -> list[RawDocument]:
        """Fetch every document in the collection."""
        documents: list[RawDocument] = []
        page_token: str | None = None

        try:
            async with self._client() as http:
                for page in range(1, _MAX_PAGES + 1):
                    resp = await http.get(
                        self.collection_url,
                        params=self._params(pageSize=self.page_size, pageToken=page_token),
                    )
                    if resp.status_code != 200:
                        logger.error(
                            "Firestore list failed: %s %s",
                            resp.status_code,
                            resp.text[:200],
                        )
                        raise ContactSourceError(
                            f"Failed to fetch contacts: {resp.status_code}"
                        )

                    data = resp.json()
                    batch = data.get("documents") or []
                    documents.extend(_to_raw_document(doc) for doc in batch)
                    logger.debug("Firestore page %d: %d documents", page, len(batch))

                    page_token = data.get("nextPageToken")
                    if not page_token:
                        break
                else:
                    logger.warning(
                        "Firestore list stopped after %d pages (%d documents)",
                        _MAX_PAGES,
                        len(documents),
                    )
        except httpx.TimeoutException as e:
            raise ContactSourceTimeout("Timed out fetching contacts") from e
        except httpx.HTTPError as e:
            raise ContactSourceError(f"Failed to fetch contacts: {e}") from e
        except ValueError as e:
            raise ContactSourceError("Invalid response from document store") from e

        logger.info("Fetched %d contact documents", len(documents))
        return documents

    async def get_document(self, doc_id: str) -> RawDocument | None:
        """Fetch a single document, or None when it does not exist."""
        url = f"{self.collection_url}/{doc_id}"
        try:
            async with self._client() as http:
                resp = await http.get(url, params=self._params())
                if resp.status_code == 404:
                    return None
                if resp.status_code != 200:
                    logger.error(
                        "Firestore get failed: %s %s", resp.status_code, resp.text[:200]
                    )
                    raise ContactSourceError(f"Failed to fetch contact: {resp.status_code}")
                return _to_raw_document(resp.json())
        except httpx.TimeoutException as e:
            raise ContactSourceTimeout("Timed out fetching contact") from e
        except httpx.HTTPError as e:
            raise ContactSourceError(f"Failed to fetch contact: {e}") from e
        except ValueError as e:
            raise ContactSourceError("Invalid response from document store") from e
