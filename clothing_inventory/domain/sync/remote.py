# clothing_inventory/domain/sync/remote.py
"""Client for the cloud replica, a realtime database tree addressed as
``<root>/<collection>/<id>.json``.

Every call is gated: while the host reports no network, nobody is signed in,
or no database URL is configured, operations do nothing and return ``None``
(reads, subscriptions) or ``False`` (writes).
"""
import asyncio
import json
import logging
from contextlib import suppress
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Tuple

import httpx

from clothing_inventory.core.errors import SyncError
from clothing_inventory.core.observability import log_event

from .auth import FirebaseAuth
from .connectivity import NetworkMonitor

logger = logging.getLogger("clothing_inventory.sync")

Snapshot = Dict[str, Dict[str, Any]]
SnapshotHandler = Callable[[Snapshot], Awaitable[None]]


def normalize_snapshot(value: Any) -> Snapshot:
    """Turn whatever the database returns for a collection into ``{id: record}``.

    An absent collection reads as ``null``; collections keyed by small
    integers come back as JSON arrays with ``null`` holes.
    """
    if value is None:
        return {}
    if isinstance(value, list):
        return {str(i): v for i, v in enumerate(value) if v is not None}
    if isinstance(value, dict):
        return {str(k): v for k, v in value.items() if v is not None}
    raise SyncError(f"Unexpected remote collection payload of type {type(value).__name__}")


async def iter_sse(lines: AsyncIterator[str]) -> AsyncIterator[Tuple[str, Any]]:
    """Parse a server-sent event stream into ``(event, data)`` pairs."""
    event, data = "message", []
    async for line in lines:
        if line == "":
            if data:
                raw = "\n".join(data)
                try:
                    payload = json.loads(raw)
                except ValueError:
                    payload = raw
                yield event, payload
            event, data = "message", []
        elif line.startswith(":"):
            continue
        elif line.startswith("event:"):
            event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            data.append(line[len("data:"):].strip())


class Subscription:
    """Handle for one live collection stream."""

    def __init__(self, collection: str, task: "asyncio.Task"):
        self.collection = collection
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    async def close(self) -> None:
        self._task.cancel()
        await self.wait_closed()

    async def wait_closed(self) -> None:
        with suppress(asyncio.CancelledError):
            await self._task


class RemoteMirrorClient:
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: Optional[str],
        auth: FirebaseAuth,
        network: NetworkMonitor,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/") if base_url else None
        self.auth = auth
        self.network = network

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    @property
    def available(self) -> bool:
        return self.configured and self.network.online and self.auth.current_user is not None

    def _url(self, collection: str, record_id=None) -> str:
        if record_id is None:
            return f"{self.base_url}/{collection}.json"
        return f"{self.base_url}/{collection}/{record_id}.json"

    def _params(self) -> Dict[str, str]:
        return {"auth": self.auth.current_user.id_token}

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, params=self._params(), **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise SyncError(
                f"Remote {method} failed with status {status}",
                details={"status": status, "url": url},
            ) from exc
        except httpx.HTTPError as exc:
            raise SyncError(f"Remote {method} failed: {exc}", details={"url": url}) from exc
        return response

    async def read_collection(self, collection: str) -> Optional[Snapshot]:
        if not self.available:
            return None
        response = await self._request("GET", self._url(collection))
        try:
            return normalize_snapshot(response.json())
        except ValueError as exc:
            raise SyncError(f"Remote returned invalid JSON for {collection}") from exc

    async def write_record(self, collection: str, record_id, record: Dict[str, Any]) -> bool:
        if not self.available:
            return False
        await self._request("PUT", self._url(collection, record_id), json=record)
        return True

    async def delete_record(self, collection: str, record_id) -> bool:
        if not self.available:
            return False
        await self._request("DELETE", self._url(collection, record_id))
        return True

    async def subscribe(self, collection: str, on_change: SnapshotHandler) -> Optional[Subscription]:
        """Stream changes of ``collection``; ``on_change`` always gets the whole collection."""
        if not self.available:
            return None
        task = asyncio.create_task(self._listen(collection, on_change), name=f"remote-subscription:{collection}")
        log_event(logger, "subscription_opened", collection=collection)
        return Subscription(collection, task)

    async def _listen(self, collection: str, on_change: SnapshotHandler) -> None:
        try:
            async with self.client.stream(
                "GET",
                self._url(collection),
                params=self._params(),
                headers={"Accept": "text/event-stream"},
                timeout=httpx.Timeout(self.client.timeout.connect, read=None),
            ) as response:
                if response.status_code != 200:
                    log_event(
                        logger,
                        "subscription_refused",
                        logging.WARNING,
                        collection=collection,
                        status=response.status_code,
                    )
                    return
                async for event, data in iter_sse(response.aiter_lines()):
                    if event in ("cancel", "auth_revoked"):
                        log_event(logger, "subscription_revoked", logging.WARNING, collection=collection, reason=event)
                        return
                    if event not in ("put", "patch"):
                        continue
                    if event == "put" and isinstance(data, dict) and data.get("path") == "/":
                        snapshot = normalize_snapshot(data.get("data"))
                    else:
                        snapshot = await self.read_collection(collection)
                        if snapshot is None:
                            return
                    await on_change(snapshot)
        except (httpx.HTTPError, SyncError) as exc:
            log_event(logger, "subscription_failed", logging.WARNING, collection=collection, error=str(exc))
        finally:
            log_event(logger, "subscription_closed", collection=collection)
