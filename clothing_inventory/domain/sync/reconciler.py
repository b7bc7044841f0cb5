# clothing_inventory/domain/sync/reconciler.py
"""Keeps the Local Store and the cloud replica eventually consistent.

A reconciliation pass pulls every synced collection (a non-empty remote copy
fully replaces the local one), then pushes every local record and removes
remote records that no longer exist locally. After a successful pass one
live subscription per collection keeps replacing local data whenever the
remote copy changes. Going offline or signing out closes the subscriptions.

Failures abort the pass and leave local data as it was; nothing retries
until the next network or auth transition.
"""
import asyncio
import logging
from functools import partial
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from clothing_inventory.core.errors import InventoryAppError, SyncError
from clothing_inventory.core.observability import log_event
from clothing_inventory.core.utils import iso_now
from clothing_inventory.db.schema import SYNCED_COLLECTIONS
from clothing_inventory.db.store import LocalStore, Record
from clothing_inventory.domain.changes import ChangeNotifier
from clothing_inventory.domain.records.schemas import rows_to_wire, wire_to_rows

from .auth import FirebaseAuth
from .connectivity import NetworkMonitor
from .remote import RemoteMirrorClient, Snapshot, Subscription
from .schemas import AuthUser, SyncState, SyncStatus

logger = logging.getLogger("clothing_inventory.sync")

SYNC_STREAM = "remote_mirror"


def snapshot_rows(collection: str, snapshot: Snapshot) -> List[Record]:
    """Validate a remote snapshot; the tree key is the record id."""
    records = [{**record, "id": key} for key, record in snapshot.items() if isinstance(record, dict)]
    try:
        rows = wire_to_rows(collection, records)
    except PydanticValidationError as exc:
        raise SyncError(
            f"Remote {collection} holds records that cannot be stored locally",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from None
    return sorted(rows, key=lambda row: row["id"])


class SyncReconciler:
    def __init__(
        self,
        store: LocalStore,
        remote: RemoteMirrorClient,
        auth: FirebaseAuth,
        network: NetworkMonitor,
        changes: Optional[ChangeNotifier] = None,
        collections: Sequence[str] = SYNCED_COLLECTIONS,
    ):
        self.store = store
        self.remote = remote
        self.auth = auth
        self.network = network
        self.changes = changes
        self.collections = tuple(collections)
        self.state = SyncState.IDLE
        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = asyncio.Lock()
        self._unlisten = []

    @property
    def subscriptions(self) -> Dict[str, Subscription]:
        return dict(self._subscriptions)

    # -------------------------
    # lifecycle
    # -------------------------

    async def start(self) -> None:
        self._unlisten.append(self.network.add_listener(self._on_network_change))
        self._unlisten.append(self.auth.on_auth_state_changed(self._on_auth_change))
        if self.changes is not None:
            self._unlisten.append(self.changes.subscribe(self.record_local_change))
        if self.remote.available:
            await self.reconcile()

    async def shutdown(self) -> None:
        for unlisten in self._unlisten:
            unlisten()
        self._unlisten.clear()
        await self.go_idle("shutdown")

    async def _on_network_change(self, online: bool) -> None:
        if online:
            await self.reconcile()
        else:
            await self.go_idle("offline")

    async def _on_auth_change(self, user: Optional[AuthUser]) -> None:
        if user is not None:
            await self.reconcile()
        else:
            await self.go_idle("signed_out")

    async def go_idle(self, reason: str) -> None:
        subscriptions = list(self._subscriptions.values())
        self._subscriptions.clear()
        for subscription in subscriptions:
            await subscription.close()
        if self.state is not SyncState.IDLE or subscriptions:
            log_event(logger, "sync_idle", reason=reason, closed=len(subscriptions))
        self.state = SyncState.IDLE

    # -------------------------
    # reconciliation
    # -------------------------

    async def reconcile(self, raise_errors: bool = False) -> bool:
        """Run one pull-then-push pass. Returns whether it completed."""
        if not self.remote.available:
            if raise_errors:
                raise SyncError("Cloud sync is not available: offline, signed out or not configured")
            return False

        async with self._lock:
            self.state = SyncState.PULLING_THEN_PUSHING
            log_event(logger, "sync_started", collections=list(self.collections))
            try:
                pulled = await self._pull()
                pushed = await self._push(self.collections)
            except SyncError as exc:
                self.state = SyncState.SUBSCRIBED if self._subscriptions else SyncState.IDLE
                log_event(logger, "sync_failed", logging.WARNING, error=exc.message, details=exc.details)
                if raise_errors:
                    raise
                return False

            await self._mark_sync_complete()
            await self._ensure_subscribed()
            self.state = SyncState.SUBSCRIBED if self._subscriptions else SyncState.IDLE
            log_event(logger, "sync_completed", pulled=pulled, pushed=pushed, state=self.state.value)
            return True

    async def _read(self, collection: str) -> Snapshot:
        snapshot = await self.remote.read_collection(collection)
        if snapshot is None:
            raise SyncError("Cloud sync became unavailable during the pass")
        return snapshot

    async def _pull(self) -> Dict[str, int]:
        # read and validate everything before touching local data
        incoming = {}
        for collection in self.collections:
            snapshot = await self._read(collection)
            if snapshot:
                incoming[collection] = snapshot_rows(collection, snapshot)

        try:
            async with self.store.transaction() as session:
                for collection, rows in incoming.items():
                    await self.store.replace_all(collection, rows, session=session)
        except SQLAlchemyError as exc:
            raise SyncError(f"Could not store pulled data: {exc}") from exc
        return {collection: len(rows) for collection, rows in incoming.items()}

    async def _push(self, collections: Sequence[str]) -> Dict[str, int]:
        pushed = {}
        for collection in collections:
            records = rows_to_wire(collection, await self.store.all(collection))
            local_ids = set()
            for record in records:
                local_ids.add(str(record["id"]))
                if not await self.remote.write_record(collection, record["id"], record):
                    raise SyncError("Cloud sync became unavailable during the pass")
            for stale_id in set(await self._read(collection)) - local_ids:
                await self.remote.delete_record(collection, stale_id)
            pushed[collection] = len(records)
        return pushed

    async def _ensure_subscribed(self) -> None:
        for collection in self.collections:
            current = self._subscriptions.get(collection)
            if current is not None and current.active:
                continue
            subscription = await self.remote.subscribe(collection, partial(self._on_remote_snapshot, collection))
            if subscription is not None:
                self._subscriptions[collection] = subscription

    async def _on_remote_snapshot(self, collection: str, snapshot: Snapshot) -> None:
        if not snapshot:
            return
        try:
            rows = snapshot_rows(collection, snapshot)
        except SyncError as exc:
            log_event(logger, "remote_snapshot_rejected", logging.WARNING, collection=collection, error=exc.message)
            return
        async with self._lock:
            if self.state is SyncState.IDLE:
                return
            try:
                await self.store.replace_all(collection, rows)
            except (InventoryAppError, SQLAlchemyError) as exc:
                log_event(logger, "remote_snapshot_failed", logging.ERROR, collection=collection, error=str(exc))
                return
        log_event(logger, "remote_snapshot_applied", collection=collection, records=len(rows))

    # -------------------------
    # local changes and metadata
    # -------------------------

    async def record_local_change(self, collections: Sequence[str]) -> None:
        """Mirror a local write, or count it when the remote cannot be reached."""
        names = [c for c in collections if c in self.collections]
        if not names:
            return
        if not self.remote.available:
            await self._bump_offline_changes()
            return
        async with self._lock:
            try:
                await self._push(names)
            except SyncError as exc:
                log_event(logger, "push_failed", logging.WARNING, collections=names, error=exc.message)
                await self._bump_offline_changes()

    async def _cursor(self, session) -> Record:
        cursor = await self.store.first("syncCursors", session=session, stream_name=SYNC_STREAM)
        if cursor is None:
            now = iso_now()
            cursor_id = await self.store.add(
                "syncCursors",
                {"stream_name": SYNC_STREAM, "offline_changes": 0, "created_at": now, "updated_at": now},
                session=session,
            )
            cursor = await self.store.get("syncCursors", cursor_id, session=session)
        return cursor

    async def _bump_offline_changes(self) -> None:
        async with self.store.transaction() as session:
            cursor = await self._cursor(session)
            await self.store.increment(
                "syncCursors", cursor["id"], "offline_changes", 1, extra={"updated_at": iso_now()}, session=session
            )

    async def _mark_sync_complete(self) -> None:
        now = iso_now()
        async with self.store.transaction() as session:
            cursor = await self._cursor(session)
            await self.store.update(
                "syncCursors",
                cursor["id"],
                {"last_synced_at": now, "offline_changes": 0, "updated_at": now},
                session=session,
            )

    async def status(self) -> SyncStatus:
        cursor = await self.store.first("syncCursors", stream_name=SYNC_STREAM)
        return SyncStatus(
            state=self.state,
            online=self.network.online,
            authenticated=self.auth.current_user is not None,
            configured=self.remote.configured,
            last_sync=cursor["last_synced_at"] if cursor else None,
            offline_changes=cursor["offline_changes"] if cursor else 0,
            subscriptions=sorted(name for name, sub in self._subscriptions.items() if sub.active),
        )
