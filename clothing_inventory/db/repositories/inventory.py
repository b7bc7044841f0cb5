
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clothing_inventory.db.store import LocalStore, Record


async def get_inventory_for_clothing(
    store: LocalStore,
    clothing_id: int,
    session: Optional[AsyncSession] = None,
) -> Optional[Record]:
    # first match wins when duplicates exist
    return await store.first("inventory", session=session, clothing_id=clothing_id)


async def get_quantity(
    store: LocalStore,
    clothing_id: int,
    session: Optional[AsyncSession] = None,
) -> int:
    row = await get_inventory_for_clothing(store, clothing_id, session)
    return int(row["quantity"]) if row else 0


async def quantities_by_clothing(store: LocalStore) -> Dict[int, int]:
    out: Dict[int, int] = {}
    for row in await store.all("inventory"):
        out.setdefault(row["clothing_id"], int(row["quantity"] or 0))
    return out
