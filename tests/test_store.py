import pytest
from sqlalchemy import inspect, text

from clothing_inventory.core.errors import StoreInitError, ValidationError
from clothing_inventory.db.schema import LATEST_SCHEMA_VERSION
from clothing_inventory.db.store import LocalStore

from conftest import make_clothing

pytestmark = pytest.mark.anyio


async def _columns(store: LocalStore, table: str):
    async with store.engine.connect() as conn:
        return await conn.run_sync(lambda c: {col["name"] for col in inspect(c).get_columns(table)})


async def _tables(store: LocalStore):
    async with store.engine.connect() as conn:
        return set(await conn.run_sync(lambda c: inspect(c).get_table_names()))


async def test_open_creates_every_collection(store):
    assert store.schema_version == LATEST_SCHEMA_VERSION
    tables = await _tables(store)
    assert {"clothes", "inventory", "stock_in", "stock_out", "settings", "sync_cursors"} <= tables
    assert await _columns(store, "sync_cursors") == {
        "id", "stream_name", "last_synced_at", "offline_changes", "created_at", "updated_at"
    }


async def test_open_is_idempotent(store):
    clothing_id = await make_clothing(store)

    assert await store.open() == LATEST_SCHEMA_VERSION
    assert await store.open() == LATEST_SCHEMA_VERSION
    assert (await store.get("clothes", clothing_id))["code"] == "F001"
    assert await store.count("clothes") == 1


async def test_upgrade_keeps_existing_rows(db_url):
    old = LocalStore(db_url)
    await old.open(1)
    clothing_id = await make_clothing(old)
    await old.add(
        "stockOut",
        {"clothing_id": clothing_id, "quantity": 1, "selling_price": 15, "total_amount": 15, "date": "2024-01-02"},
    )
    assert "updated_at" not in await _columns(old, "stock_out")
    assert "settings" not in await _tables(old)
    await old.close()

    upgraded = LocalStore(db_url)
    try:
        assert await upgraded.open(3) == 3
        assert "updated_at" in await _columns(upgraded, "stock_out")
        assert {"settings", "sync_cursors"} <= await _tables(upgraded)
        sale = await upgraded.first("stockOut", clothing_id=clothing_id)
        assert sale["total_amount"] == 15
        assert sale["updated_at"] is None
        assert (await upgraded.get("clothes", clothing_id))["code"] == "F001"
    finally:
        await upgraded.close()


async def test_open_refuses_downgrade(store, db_url):
    older = LocalStore(db_url)
    with pytest.raises(StoreInitError):
        await older.open(2)
    assert older.init_error is not None
    await older.close()


async def test_open_reports_unreachable_storage(tmp_path):
    store = LocalStore(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nested' / 'inventory.db'}")
    with pytest.raises(StoreInitError):
        await store.open()

    # every later call surfaces the same failure
    with pytest.raises(StoreInitError):
        await store.all("clothes")
    await store.close()


async def test_unopened_store_rejects_operations(db_url):
    store = LocalStore(db_url)
    with pytest.raises(StoreInitError):
        await store.count("clothes")
    await store.close()


async def test_unknown_collection(store):
    with pytest.raises(ValidationError):
        await store.all("orders")


async def test_crud_round(store):
    clothing_id = await make_clothing(store, code="S100")

    assert await store.update("clothes", clothing_id, {"name": "Linen shirt", "not_a_column": 1})
    assert (await store.get("clothes", clothing_id))["name"] == "Linen shirt"
    assert not await store.update("clothes", 999, {"name": "ghost"})

    assert await store.delete("clothes", clothing_id)
    assert await store.get("clothes", clothing_id) is None
    assert not await store.delete("clothes", clothing_id)


async def test_query_filters_and_orders_by_id(store):
    ids = [await make_clothing(store, code=f"C{i}", category="Pants" if i % 2 else "Shirts") for i in range(4)]

    pants = await store.query("clothes", category="Pants")
    assert [row["id"] for row in pants] == [ids[1], ids[3]]
    assert (await store.first("clothes", category="Shirts"))["id"] == ids[0]
    assert await store.first("clothes", code="missing") is None


async def test_increment_respects_floor(store):
    clothing_id = await make_clothing(store)
    inventory_id = await store.add("inventory", {"clothing_id": clothing_id, "quantity": 3})

    assert await store.increment("inventory", inventory_id, "quantity", -2, floor=0)
    assert (await store.get("inventory", inventory_id))["quantity"] == 1

    assert not await store.increment("inventory", inventory_id, "quantity", -2, floor=0)
    assert (await store.get("inventory", inventory_id))["quantity"] == 1

    assert await store.increment("inventory", inventory_id, "quantity", -2)
    assert (await store.get("inventory", inventory_id))["quantity"] == -1


async def test_transaction_rolls_back_every_write(store):
    clothing_id = await make_clothing(store)

    with pytest.raises(RuntimeError):
        async with store.transaction() as session:
            await store.add("inventory", {"clothing_id": clothing_id, "quantity": 5}, session=session)
            await store.update("clothes", clothing_id, {"name": "changed"}, session=session)
            raise RuntimeError("boom")

    assert await store.count("inventory") == 0
    assert (await store.get("clothes", clothing_id))["name"] == "Item F001"


async def test_replace_all_keeps_given_ids(store):
    await make_clothing(store, code="OLD")
    rows = [
        {"id": 7, "code": "B", "name": "B", "purchase_price": 1, "selling_price": 2},
        {"id": 9, "code": "C", "name": "C", "purchase_price": 1, "selling_price": 2},
    ]

    assert await store.replace_all("clothes", rows) == 2
    assert [row["id"] for row in await store.all("clothes")] == [7, 9]

    # new rows continue after the highest id
    assert await make_clothing(store, code="D") > 9


async def test_delete_many_and_where(store):
    ids = [await make_clothing(store, code=f"X{i}") for i in range(3)]
    for clothing_id in ids:
        await store.add("inventory", {"clothing_id": clothing_id, "quantity": 1})

    assert await store.delete_many("clothes", ids[:2]) == 2
    assert await store.delete_many("clothes", []) == 0
    assert await store.delete_where("inventory", clothing_id=ids[2]) == 1
    assert await store.count("clothes") == 1
    assert await store.count("inventory") == 2


async def test_ids_are_not_reused_after_delete(store):
    first = await make_clothing(store, code="A")
    top = await make_clothing(store, code="B")
    assert await store.delete("clothes", top)

    assert await make_clothing(store, code="C") > top
    assert (await store.get("clothes", first))["code"] == "A"


async def test_upgrade_retires_ids_of_orphaned_history(db_url):
    old = LocalStore(db_url)
    await old.open(3)
    # clothes as created before ids were monotonic
    async with old.engine.begin() as conn:
        await conn.execute(text("DROP TABLE clothes"))
        await conn.execute(
            text(
                "CREATE TABLE clothes (id INTEGER NOT NULL PRIMARY KEY, code VARCHAR NOT NULL, "
                "name VARCHAR NOT NULL, category VARCHAR, size VARCHAR, color VARCHAR, "
                "purchase_price NUMERIC(18, 2) NOT NULL, selling_price NUMERIC(18, 2) NOT NULL, "
                "created_at VARCHAR, updated_at VARCHAR)"
            )
        )
    first = await make_clothing(old, code="A")
    top = await make_clothing(old, code="B")
    await old.add("stockIn", {"clothing_id": top, "quantity": 2, "purchase_price": 10, "total_amount": 20})
    await old.delete("clothes", top)
    await old.close()

    upgraded = LocalStore(db_url)
    try:
        assert await upgraded.open() == LATEST_SCHEMA_VERSION
        async with upgraded.engine.connect() as conn:
            sql = (
                await conn.execute(text("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = 'clothes'"))
            ).scalar()
        assert "AUTOINCREMENT" in sql.upper()
        assert (await upgraded.get("clothes", first))["code"] == "A"

        created = await make_clothing(upgraded, code="C")
        assert created > top
        assert await upgraded.query("stockIn", clothing_id=created) == []
    finally:
        await upgraded.close()
