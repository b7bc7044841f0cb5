"""Process-wide service graph, built once at startup and handed to consumers."""
from dataclasses import dataclass
from typing import Optional

import httpx

from clothing_inventory.core.config import Settings
from clothing_inventory.core.errors import StoreInitError
from clothing_inventory.db.store import LocalStore
from clothing_inventory.domain.backup.codec import BackupCodec
from clothing_inventory.domain.catalog.service import CatalogService
from clothing_inventory.domain.changes import ChangeNotifier
from clothing_inventory.domain.inventory.service import InventoryService
from clothing_inventory.domain.preferences.service import PreferencesService
from clothing_inventory.domain.records.service import RecordsService
from clothing_inventory.domain.reports.service import ReportsService
from clothing_inventory.domain.sync.auth import FirebaseAuth
from clothing_inventory.domain.sync.connectivity import NetworkMonitor
from clothing_inventory.domain.sync.reconciler import SyncReconciler
from clothing_inventory.domain.sync.remote import RemoteMirrorClient


@dataclass
class AppContext:
    settings: Settings
    store: LocalStore
    changes: ChangeNotifier
    inventory: InventoryService
    catalog: CatalogService
    preferences: PreferencesService
    reports: ReportsService
    records: RecordsService
    backup: BackupCodec
    network: NetworkMonitor
    http: httpx.AsyncClient
    auth: FirebaseAuth
    remote: RemoteMirrorClient
    reconciler: SyncReconciler

    async def start(self) -> None:
        try:
            await self.store.open(self.settings.SCHEMA_VERSION)
        except StoreInitError:
            # kept on store.init_error; every store-backed call re-raises it
            return
        await self.reconciler.start()

    async def close(self) -> None:
        await self.reconciler.shutdown()
        await self.http.aclose()
        await self.store.close()


def build_context(settings: Settings, http: Optional[httpx.AsyncClient] = None) -> AppContext:
    store = LocalStore(settings.DB_URL)
    changes = ChangeNotifier()
    inventory = InventoryService(store, changes, stock_out_guard=settings.STOCK_OUT_GUARD)
    preferences = PreferencesService(
        store,
        default_threshold=settings.LOW_STOCK_DEFAULT_THRESHOLD,
        default_sound=settings.SOUND_ENABLED_DEFAULT,
    )
    network = NetworkMonitor(online=settings.START_ONLINE)
    http = http or httpx.AsyncClient(timeout=settings.REMOTE_TIMEOUT_SECONDS)
    auth = FirebaseAuth(
        http,
        settings.FIREBASE_API_KEY,
        base_url=settings.AUTH_BASE_URL,
        timeout=settings.AUTH_TIMEOUT_SECONDS,
    )
    remote = RemoteMirrorClient(http, settings.FIREBASE_DATABASE_URL, auth, network)
    return AppContext(
        settings=settings,
        store=store,
        changes=changes,
        inventory=inventory,
        catalog=CatalogService(store, inventory, changes),
        preferences=preferences,
        reports=ReportsService(store, preferences),
        records=RecordsService(store, changes),
        backup=BackupCodec(store, changes, version=settings.BACKUP_VERSION),
        network=network,
        http=http,
        auth=auth,
        remote=remote,
        reconciler=SyncReconciler(store, remote, auth, network, changes),
    )
