# clothing_inventory/domain/catalog/service.py
from typing import List, Optional

from clothing_inventory.core.errors import NotFoundError, ValidationError
from clothing_inventory.core.utils import iso_now, round_money
from clothing_inventory.db.repositories.clothes import get_clothing_by_id
from clothing_inventory.db.repositories.inventory import (
    get_inventory_for_clothing,
    get_quantity,
    quantities_by_clothing,
)
from clothing_inventory.db.store import LocalStore, Record
from clothing_inventory.domain.changes import ChangeNotifier
from clothing_inventory.domain.inventory.service import InventoryService

from .schemas import ClothingCreate, ClothingOut, ClothingUpdate

REQUIRED_FIELDS = ("code", "name", "category", "size", "color")


def _price(value, label: str) -> float:
    price = round_money(value or 0)
    if price < 0:
        raise ValidationError(f"{label} cannot be negative")
    return price


def _to_out(row: Record, quantity: int) -> ClothingOut:
    return ClothingOut.model_validate({**row, "quantity": quantity})


class CatalogService:
    def __init__(self, store: LocalStore, inventory: InventoryService, changes: Optional[ChangeNotifier] = None):
        self.store = store
        self.inventory = inventory
        self.changes = changes or inventory.changes

    async def list_clothes(self, search: Optional[str] = None, category: Optional[str] = None) -> List[ClothingOut]:
        quantities = await quantities_by_clothing(self.store)
        term = (search or "").strip().lower()
        out = []
        for row in await self.store.all("clothes"):
            if category and row["category"] != category:
                continue
            if term and not any(term in str(row[f] or "").lower() for f in ("code", "name", "color", "size")):
                continue
            out.append(_to_out(row, quantities.get(row["id"], 0)))
        return out

    async def get_clothing(self, clothing_id: int) -> ClothingOut:
        row = await get_clothing_by_id(self.store, clothing_id)
        if row is None:
            raise NotFoundError(f"Clothing {clothing_id} not found")
        return _to_out(row, await get_quantity(self.store, clothing_id))

    async def create_clothing(self, data: ClothingCreate) -> ClothingOut:
        values = {f: (getattr(data, f) or "").strip() for f in REQUIRED_FIELDS}
        missing = [f for f, v in values.items() if not v]
        if missing:
            raise ValidationError("Fill in all required fields", details={"missing": missing})
        if data.quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        now = iso_now()
        async with self.store.transaction() as session:
            clothing_id = await self.store.add(
                "clothes",
                {
                    **values,
                    "purchase_price": _price(data.purchase_price, "Purchase price"),
                    "selling_price": _price(data.selling_price, "Selling price"),
                    "created_at": now,
                    "updated_at": now,
                },
                session=session,
            )
            await self.store.add(
                "inventory",
                {"clothing_id": clothing_id, "quantity": data.quantity, "updated_at": now},
                session=session,
            )

        await self.changes.notify(("clothes", "inventory"))
        return await self.get_clothing(clothing_id)

    async def update_clothing(self, clothing_id: int, data: ClothingUpdate) -> ClothingOut:
        partial = data.model_dump(exclude_unset=True, exclude={"quantity"})
        for field in REQUIRED_FIELDS:
            if field in partial:
                partial[field] = (partial[field] or "").strip()
                if not partial[field]:
                    raise ValidationError(f"{field} cannot be empty")
        if "purchase_price" in partial:
            partial["purchase_price"] = _price(partial["purchase_price"], "Purchase price")
        if "selling_price" in partial:
            partial["selling_price"] = _price(partial["selling_price"], "Selling price")
        if data.quantity is not None and data.quantity < 0:
            raise ValidationError("Quantity cannot be negative")

        now = iso_now()
        touched = ["clothes"]
        async with self.store.transaction() as session:
            if not await self.store.update("clothes", clothing_id, {**partial, "updated_at": now}, session=session):
                raise NotFoundError(f"Clothing {clothing_id} not found")
            if data.quantity is not None:
                touched.append("inventory")
                row = await get_inventory_for_clothing(self.store, clothing_id, session)
                if row is not None:
                    await self.store.update(
                        "inventory", row["id"], {"quantity": data.quantity, "updated_at": now}, session=session
                    )
                else:
                    await self.store.add(
                        "inventory",
                        {"clothing_id": clothing_id, "quantity": data.quantity, "updated_at": now},
                        session=session,
                    )

        await self.changes.notify(touched)
        return await self.get_clothing(clothing_id)

    async def delete_clothing(self, clothing_id: int) -> None:
        await self.inventory.delete_clothing(clothing_id)

    async def categories(self) -> List[str]:
        return sorted({row["category"] for row in await self.store.all("clothes") if row["category"]})
