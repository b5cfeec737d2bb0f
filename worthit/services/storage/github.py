"""
GitHub JSON Storage Implementation

DESIGN DECISION: A GitHub repository doubles as a tiny database.
Each collection is one JSON file (data/finances.json, data/media.json)
updated through the contents API, so:
1. Every change is a commit (free history and backup)
2. Entries sync between devices with nothing but a token
3. The files stay human readable

TRADEOFFS:
- Every write is read-modify-write of the whole file
- Concurrent writers conflict on the file SHA (surfaced as a failure,
  the fallback chain then keeps the entry locally)
"""

import base64
import json
from datetime import datetime, timezone
from typing import Any, Optional, Union

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from worthit.config import GitHubSettings, get_settings
from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
    materialize_entry,
)
from worthit.services.storage.codec import (
    DecodedCollection,
    decode_collection,
    encode_collection,
)
from worthit.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
)

logger = structlog.get_logger(__name__)

USER_AGENT = "Worth-It-Tracker"


class GitHubJsonStorage(EntryStorageInterface):
    """
    Entry storage in JSON files of a GitHub repository.
    """

    name = "github"

    def __init__(
        self,
        settings: Optional[GitHubSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._settings = settings or get_settings().github
        self._client = client

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._settings.api_base,
            timeout=self._settings.timeout_seconds,
        )

    @staticmethod
    def filename_for(kind: CollectionKind) -> str:
        return f"{kind.collection_name}.json"

    def _contents_path(self, kind: CollectionKind) -> str:
        s = self._settings
        file_path = f"{s.data_path.strip('/')}/{self.filename_for(kind)}".lstrip("/")
        return f"/repos/{s.owner}/{s.repo}/contents/{file_path}"

    def _headers(self) -> dict[str, str]:
        if not self._settings.token:
            raise StorageUnavailableError("No GitHub token available")
        return {
            "Authorization": f"Bearer {self._settings.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = self._headers()
        if self._client is not None:
            return await self._client.request(method, path, headers=headers, **kwargs)
        async with self._new_client() as client:
            return await client.request(method, path, headers=headers, **kwargs)

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request; 404 is returned to the caller, other errors raise."""
        try:
            response = await self._send(method, path, **kwargs)
        except httpx.TransportError as e:
            raise StorageUnavailableError(f"GitHub unreachable: {e}")

        if response.status_code == 404 or response.is_success:
            return response

        try:
            message = response.json().get("message", response.reason_phrase)
        except (ValueError, AttributeError):
            message = response.reason_phrase
        error = f"GitHub API error: {response.status_code} - {message}"
        if response.status_code >= 500 or response.status_code in (401, 403, 409):
            raise StorageUnavailableError(error)
        raise StorageError(error)

    async def read_file(
        self,
        kind: CollectionKind,
    ) -> tuple[DecodedCollection, Optional[str]]:
        """
        Read a collection file.

        Returns:
            (collection, sha) - sha is None when the file doesn't exist yet
        """
        response = await self._request(
            "GET",
            self._contents_path(kind),
            params={"ref": self._settings.branch},
        )
        if response.status_code == 404:
            return DecodedCollection(), None

        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise ValueError("contents response is not an object")
            raw = base64.b64decode(payload.get("content", "")).decode("utf-8")
            documents = json.loads(raw) if raw.strip() else []
            return decode_collection(kind, documents), payload.get("sha")
        except ValueError as e:
            # Covers JSONDecodeError, UnicodeDecodeError and binascii.Error
            raise StorageError(f"{self.filename_for(kind)} is not valid JSON: {e}")

    async def write_file(
        self,
        kind: CollectionKind,
        entries: list[Entry],
        sha: Optional[str] = None,
        unparsed: Optional[list] = None,
    ) -> dict:
        """Commit a collection file (creating it when sha is None)."""
        filename = self.filename_for(kind)
        content = json.dumps(
            encode_collection(entries, unparsed or []),
            indent=2,
            ensure_ascii=False,
        )
        body = {
            "message": f"Update {filename} - {datetime.now(timezone.utc).isoformat()}",
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": self._settings.branch,
        }
        if sha:
            body["sha"] = sha

        response = await self._request("PUT", self._contents_path(kind), json=body)
        if response.status_code == 404:
            raise StorageUnavailableError(
                f"Repository {self._settings.owner}/{self._settings.repo} not found"
            )
        logger.debug("github_file_committed", file=filename, entries=len(entries))
        try:
            return response.json()
        except ValueError:
            return {}

    async def add_entry(
        self,
        kind: CollectionKind,
        data: Union[EntryCreate, Entry],
    ) -> Entry:
        entry = materialize_entry(kind, data)
        stored, sha = await self.read_file(kind)
        entries = [e for e in stored.entries if e.id != entry.id]
        entries.append(entry)
        await self.write_file(kind, entries, sha, stored.unparsed)
        return entry

    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        stored, sha = await self.read_file(kind)
        remaining = [e for e in stored.entries if e.id != entry_id]
        if len(remaining) == len(stored.entries):
            return False
        await self.write_file(kind, remaining, sha, stored.unparsed)
        return True

    async def list_entries(self, kind: CollectionKind) -> list[Entry]:
        stored, _ = await self.read_file(kind)
        return stored.entries

    async def update_entry(
        self,
        kind: CollectionKind,
        entry_id: str,
        patch: EntryPatch,
    ) -> Entry:
        stored, sha = await self.read_file(kind)
        entries = stored.entries
        for index, entry in enumerate(entries):
            if entry.id == entry_id:
                entries[index] = patch.apply_to(entry)
                await self.write_file(kind, entries, sha, stored.unparsed)
                return entries[index]
        raise NotFoundError(f"Entry not found: {entry_id}")

    async def replace_entries(
        self,
        kind: CollectionKind,
        entries: list[Entry],
    ) -> None:
        stored, sha = await self.read_file(kind)
        await self.write_file(kind, list(entries), sha, stored.unparsed)

    async def check_token(self) -> bool:
        """True if the configured token is accepted by GitHub."""
        try:
            response = await self._request("GET", "/user")
        except StorageError:
            return False
        return response.is_success
