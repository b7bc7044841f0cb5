import pytest
from fastapi.testclient import TestClient

from clothing_inventory.core.config import Settings
from clothing_inventory.db.store import LocalStore
from clothing_inventory.domain.catalog.service import CatalogService
from clothing_inventory.domain.changes import ChangeNotifier
from clothing_inventory.domain.inventory.service import InventoryService
from clothing_inventory.domain.preferences.service import PreferencesService
from clothing_inventory.domain.sync.auth import FirebaseAuth
from clothing_inventory.domain.sync.connectivity import NetworkMonitor
from clothing_inventory.domain.sync.reconciler import SyncReconciler
from clothing_inventory.domain.sync.remote import RemoteMirrorClient
from clothing_inventory.main import create_app

from fake_firebase import API_KEY, DATABASE_URL, FakeFirebase


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'inventory.db'}"


@pytest.fixture
async def store(db_url):
    store = LocalStore(db_url)
    await store.open()
    yield store
    await store.close()


@pytest.fixture
def changes():
    return ChangeNotifier()


@pytest.fixture
def inventory(store, changes):
    return InventoryService(store, changes)


@pytest.fixture
def catalog(store, inventory, changes):
    return CatalogService(store, inventory, changes)


@pytest.fixture
def preferences(store):
    return PreferencesService(store, default_threshold=10)


@pytest.fixture
def fake_firebase():
    return FakeFirebase()


@pytest.fixture
async def http(fake_firebase):
    client = fake_firebase.client()
    yield client
    await client.aclose()


@pytest.fixture
def network():
    return NetworkMonitor(online=True)


@pytest.fixture
def auth(http):
    return FirebaseAuth(http, API_KEY, timeout=5.0)


@pytest.fixture
def remote(http, auth, network):
    return RemoteMirrorClient(http, DATABASE_URL, auth, network)


@pytest.fixture
async def reconciler(store, remote, auth, network, changes):
    reconciler = SyncReconciler(store, remote, auth, network, changes)
    await reconciler.start()
    yield reconciler
    await reconciler.shutdown()


@pytest.fixture
def test_settings(db_url):
    return Settings(
        _env_file=None,
        DB_URL=db_url,
        FIREBASE_DATABASE_URL=DATABASE_URL,
        FIREBASE_API_KEY=API_KEY,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def client(test_settings, fake_firebase):
    app = create_app(test_settings, http=fake_firebase.client())
    with TestClient(app) as client:
        yield client


async def make_clothing(store, code="F001", purchase_price=10.0, selling_price=15.0, **extra):
    """Insert a clothing row directly, without an inventory row."""
    record = {
        "code": code,
        "name": extra.pop("name", f"Item {code}"),
        "category": extra.pop("category", "Shirts"),
        "size": extra.pop("size", "M"),
        "color": extra.pop("color", "Red"),
        "purchase_price": purchase_price,
        "selling_price": selling_price,
        "created_at": "2024-01-01T00:00:00Z",
        "updated_at": "2024-01-01T00:00:00Z",
    }
    record.update(extra)
    return await store.add("clothes", record)


@pytest.fixture
def new_clothing(store):
    async def factory(**kwargs):
        return await make_clothing(store, **kwargs)

    return factory
