
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from clothing_inventory.db.store import LocalStore, Record


async def get_clothing_by_id(
    store: LocalStore,
    clothing_id: int,
    session: Optional[AsyncSession] = None,
) -> Optional[Record]:
    return await store.get("clothes", clothing_id, session=session)


async def find_variant(
    store: LocalStore,
    code: str,
    color: str,
    size: str,
    session: Optional[AsyncSession] = None,
) -> Optional[Record]:
    return await store.first("clothes", session=session, code=code, color=color, size=size)


async def clothes_by_id(store: LocalStore) -> Dict[int, Record]:
    return {row["id"]: row for row in await store.all("clothes")}
