"""
Generic REST API Storage Implementation

Talks to any HTTP service exposing the collections as resources:

    GET    {base}/{collection}          -> [entry, ...]
    POST   {base}/{collection}          -> entry
    PATCH  {base}/{collection}/{id}     -> entry
    DELETE {base}/{collection}/{id}     -> 200/204, 404 if absent
    PUT    {base}/{collection}          -> replace the whole collection

where {collection} is "finances" or "media" and entries use the
shared camelCase JSON format.
"""

from typing import Any, Optional, Union

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from worthit.config import RestApiSettings, get_settings
from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
    materialize_entry,
)
from worthit.services.storage.codec import (
    entries_from_documents,
    entries_to_documents,
)
from worthit.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
)

logger = structlog.get_logger(__name__)


class RestApiStorage(EntryStorageInterface):
    """
    Entry storage behind a generic REST API.
    """

    name = "rest"

    def __init__(
        self,
        settings: Optional[RestApiSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings or get_settings().rest_api
        self._client = client

    def _new_client(self) -> httpx.AsyncClient:
        if not self._settings.base_url:
            raise StorageUnavailableError("REST API base URL is not configured")
        headers = {"Accept": "application/json"}
        if self._settings.api_key:
            headers["Authorization"] = f"Bearer {self._settings.api_key}"
        return httpx.AsyncClient(
            base_url=self._settings.base_url,
            headers=headers,
            timeout=self._settings.timeout_seconds,
        )

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, path, **kwargs)
        async with self._new_client() as client:
            return await client.request(method, path, **kwargs)

    async def _request(
        self,
        method: str,
        path: str,
        allow_404: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        try:
            response = await self._send(method, path, **kwargs)
        except httpx.TransportError as e:
            raise StorageUnavailableError(f"REST API unreachable: {e}")

        if response.is_success or (allow_404 and response.status_code == 404):
            return response

        error = f"REST API error: {response.status_code} {response.reason_phrase}"
        if response.status_code == 404:
            raise NotFoundError(error)
        if response.status_code >= 500 or response.status_code in (401, 403, 429):
            raise StorageUnavailableError(error)
        raise StorageError(error)

    @staticmethod
    def _parse_entry(kind: CollectionKind, response: httpx.Response) -> Entry:
        try:
            payload = response.json()
            if "type" not in payload and "kind" not in payload:
                payload = {**payload, "type": kind.value}
            return Entry.model_validate(payload)
        except (ValueError, TypeError, ValidationError) as e:
            raise StorageError(f"REST API returned an invalid entry: {e}")

    async def add_entry(
        self,
        kind: CollectionKind,
        data: Union[EntryCreate, Entry],
    ) -> Entry:
        entry = materialize_entry(kind, data)
        response = await self._request(
            "POST", f"/{kind.collection_name}", json=entry.to_wire()
        )
        if not response.content:
            return entry
        return self._parse_entry(kind, response)

    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        response = await self._request(
            "DELETE", f"/{kind.collection_name}/{entry_id}", allow_404=True
        )
        return response.status_code != 404

    async def list_entries(self, kind: CollectionKind) -> list[Entry]:
        response = await self._request("GET", f"/{kind.collection_name}")
        try:
            documents = response.json()
        except ValueError as e:
            raise StorageError(f"REST API returned invalid JSON: {e}")
        # Some APIs wrap lists: {"entries": [...]}
        if isinstance(documents, dict):
            documents = documents.get("entries", [])
        return entries_from_documents(kind, documents)

    async def update_entry(
        self,
        kind: CollectionKind,
        entry_id: str,
        patch: EntryPatch,
    ) -> Entry:
        body: dict[str, Any] = {}
        changes = patch.changes()
        if "description" in changes:
            body["description"] = changes["description"]
        if "worth_it" in changes:
            body["worthIt"] = changes["worth_it"]
        if "cost" in changes:
            body["cost"] = float(changes["cost"])
        response = await self._request(
            "PATCH", f"/{kind.collection_name}/{entry_id}", json=body
        )
        return self._parse_entry(kind, response)

    async def replace_entries(
        self,
        kind: CollectionKind,
        entries: list[Entry],
    ) -> None:
        await self._request(
            "PUT", f"/{kind.collection_name}", json=entries_to_documents(entries)
        )
