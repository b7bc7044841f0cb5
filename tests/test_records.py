import pytest

from clothing_inventory.core.errors import ValidationError
from clothing_inventory.db.repositories.inventory import get_quantity
from clothing_inventory.domain.records.service import RecordsService

pytestmark = pytest.mark.anyio


@pytest.fixture
def records(store, changes):
    return RecordsService(store, changes)


async def test_list_records_joins_clothing(store, inventory, records, new_clothing):
    shirt = await new_clothing(code="SH01", name="Shirt")
    gone = await new_clothing(code="GONE", name="Gone")
    await inventory.record_stock_in(shirt, 2, 10, operator="alice")
    await inventory.record_stock_in(gone, 1, 10, operator="bob")
    await store.delete("clothes", gone)

    page = await records.list_records("stockIn")

    assert page.total == page.shown == 2
    assert [(v.clothing_code, v.clothing_name) for v in page.records] == [("SH01", "Shirt"), ("Not found", "Not found")]
    assert page.records[0].record["clothingId"] == shirt
    assert page.records[0].record["totalAmount"] == 20

    filtered = await records.list_records("stockIn", search="alice")
    assert filtered.total == 2
    assert [v.clothing_code for v in filtered.records] == ["SH01"]


async def test_delete_records_leaves_inventory(store, inventory, records, changes, new_clothing):
    seen = []

    async def listener(collections):
        seen.append(collections)

    shirt = await new_clothing()
    first = await inventory.record_stock_in(shirt, 2, 10)
    second = await inventory.record_stock_in(shirt, 3, 10)
    changes.subscribe(listener)

    result = await records.delete_records("stockIn", [first, second, 999])

    assert result.deleted == 2
    assert await store.count("stockIn") == 0
    assert await get_quantity(store, shirt) == 5
    assert seen == [("stockIn",)]


async def test_records_reject_unknown_collection_and_empty_selection(records):
    with pytest.raises(ValidationError):
        await records.list_records("settings")
    with pytest.raises(ValidationError):
        await records.delete_records("stockOut", [])
