# clothing_inventory/domain/inventory/service.py
"""Composite stock operations.

Every single-line operation (stock-in, stock-out, clothing delete) runs in
one Local Store transaction, so its clothing/inventory/movement writes land
together or not at all. Multi-line submissions are a sequence of such
operations: a failing line stops the loop and earlier lines stay written.
"""
import logging
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from clothing_inventory.core.errors import (
    InsufficientStockError,
    InventoryAppError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
)
from clothing_inventory.core.observability import log_event
from clothing_inventory.core.utils import iso_now, iso_today, round_money
from clothing_inventory.db.repositories.clothes import find_variant, get_clothing_by_id
from clothing_inventory.db.repositories.inventory import get_inventory_for_clothing, get_quantity
from clothing_inventory.db.store import LocalStore
from clothing_inventory.domain.changes import ChangeNotifier

from .schemas import ReceivedLine, StockInLine, StockOutLine, VariantLine, VariantTemplate

logger = logging.getLogger("clothing_inventory.inventory")

STOCK_IN_COLLECTIONS = ("stockIn", "inventory", "clothes")
STOCK_OUT_COLLECTIONS = ("stockOut", "inventory")


def _check_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a whole number greater than 0")
    return quantity


def _check_price(price, label: str) -> float:
    try:
        value = float(price)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number") from None
    if value <= 0:
        raise ValidationError(f"{label} must be greater than 0")
    return round_money(value)


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None


class InventoryService:
    def __init__(
        self,
        store: LocalStore,
        changes: Optional[ChangeNotifier] = None,
        *,
        stock_out_guard: bool = True,
    ):
        self.store = store
        self.changes = changes or ChangeNotifier()
        self.stock_out_guard = stock_out_guard

    # -------------------------
    # single-line steps (run inside a caller's transaction)
    # -------------------------

    async def _stock_in(
        self,
        session: AsyncSession,
        clothing_id: int,
        quantity: int,
        purchase_price: float,
        date: Optional[str],
        operator: Optional[str],
        notes: Optional[str],
    ) -> int:
        clothing = await get_clothing_by_id(self.store, clothing_id, session)
        if clothing is None:
            raise NotFoundError(f"Clothing {clothing_id} not found")

        now = iso_now()
        stock_in_id = await self.store.add(
            "stockIn",
            {
                "clothing_id": clothing_id,
                "quantity": quantity,
                "purchase_price": purchase_price,
                "total_amount": round_money(quantity * purchase_price),
                "date": date or iso_today(),
                "operator": _clean_text(operator),
                "notes": _clean_text(notes),
                "created_at": now,
            },
            session=session,
        )

        inventory = await get_inventory_for_clothing(self.store, clothing_id, session)
        if inventory is not None:
            await self.store.increment(
                "inventory", inventory["id"], "quantity", quantity, extra={"updated_at": now}, session=session
            )
        else:
            await self.store.add(
                "inventory",
                {"clothing_id": clothing_id, "quantity": quantity, "updated_at": now},
                session=session,
            )

        # latest stock-in price wins, no averaging
        await self.store.update(
            "clothes", clothing_id, {"purchase_price": purchase_price, "updated_at": now}, session=session
        )
        return stock_in_id

    async def _stock_out(
        self,
        session: AsyncSession,
        clothing_id: int,
        quantity: int,
        selling_price: float,
        date: Optional[str],
        operator: Optional[str],
        customer: Optional[str],
        notes: Optional[str],
    ) -> int:
        now = iso_now()
        stock_out_id = await self.store.add(
            "stockOut",
            {
                "clothing_id": clothing_id,
                "quantity": quantity,
                "selling_price": selling_price,
                "total_amount": round_money(quantity * selling_price),
                "date": date or iso_today(),
                "operator": _clean_text(operator),
                "customer": _clean_text(customer),
                "notes": _clean_text(notes),
                "created_at": now,
                "updated_at": now,
            },
            session=session,
        )

        inventory = await get_inventory_for_clothing(self.store, clothing_id, session)
        if inventory is None:
            if self.stock_out_guard:
                raise InsufficientStockError(clothing_id, quantity, 0)
            return stock_out_id

        applied = await self.store.increment(
            "inventory",
            inventory["id"],
            "quantity",
            -quantity,
            floor=0 if self.stock_out_guard else None,
            extra={"updated_at": now},
            session=session,
        )
        if not applied:
            available = await get_quantity(self.store, clothing_id, session)
            raise InsufficientStockError(clothing_id, quantity, available)
        return stock_out_id

    @staticmethod
    def _check_stock_out(quantity, selling_price, clothing_id: int, available_quantity: Optional[int]):
        quantity = _check_quantity(quantity)
        price = _check_price(selling_price, "Selling price")
        if available_quantity is not None and quantity > available_quantity:
            raise InsufficientStockError(clothing_id, quantity, available_quantity)
        return quantity, price

    # -------------------------
    # public operations
    # -------------------------

    async def record_stock_in(
        self,
        clothing_id: int,
        quantity: int,
        purchase_price: float,
        date: Optional[str] = None,
        operator: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        quantity = _check_quantity(quantity)
        price = _check_price(purchase_price, "Purchase price")

        async with self.store.transaction() as session:
            stock_in_id = await self._stock_in(session, clothing_id, quantity, price, date, operator, notes)

        log_event(logger, "stock_in", clothing_id=clothing_id, quantity=quantity, stock_in_id=stock_in_id)
        await self.changes.notify(STOCK_IN_COLLECTIONS)
        return stock_in_id

    async def record_stock_out(
        self,
        clothing_id: int,
        quantity: int,
        selling_price: float,
        date: Optional[str] = None,
        operator: Optional[str] = None,
        notes: Optional[str] = None,
        customer: Optional[str] = None,
        available_quantity: Optional[int] = None,
    ) -> int:
        quantity, price = self._check_stock_out(quantity, selling_price, clothing_id, available_quantity)

        async with self.store.transaction() as session:
            stock_out_id = await self._stock_out(
                session, clothing_id, quantity, price, date, operator, customer, notes
            )

        log_event(logger, "stock_out", clothing_id=clothing_id, quantity=quantity, stock_out_id=stock_out_id)
        await self.changes.notify(STOCK_OUT_COLLECTIONS)
        return stock_out_id

    async def delete_clothing(self, clothing_id: int) -> None:
        """Delete a clothing row and its inventory; stock history is kept."""
        async with self.store.transaction() as session:
            if not await self.store.delete("clothes", clothing_id, session=session):
                raise NotFoundError(f"Clothing {clothing_id} not found")
            await self.store.delete_where("inventory", clothing_id=clothing_id, session=session)

        log_event(logger, "clothing_deleted", clothing_id=clothing_id)
        await self.changes.notify(("clothes", "inventory"))

    async def _run_lines(self, kind: str, count: int, step, collections: Sequence[str]) -> List[int]:
        done: List[int] = []
        try:
            for index in range(count):
                try:
                    async with self.store.transaction() as session:
                        done.append(await step(session, index))
                except InventoryAppError as exc:
                    log_event(
                        logger,
                        f"{kind}_line_failed",
                        logging.WARNING,
                        line=index,
                        completed=len(done),
                        error=exc.message,
                    )
                    if not done:
                        raise
                    raise PartialWriteError(index, done, exc) from exc
        finally:
            if done:
                await self.changes.notify(collections)
        return done

    async def submit_stock_in(
        self,
        lines: Sequence[StockInLine],
        date: Optional[str] = None,
        operator: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> List[int]:
        if not lines:
            raise ValidationError("Add at least one line")
        checked = [(_check_quantity(line.quantity), _check_price(line.purchase_price, "Purchase price")) for line in lines]

        async def step(session, index):
            quantity, price = checked[index]
            return await self._stock_in(session, lines[index].clothing_id, quantity, price, date, operator, notes)

        return await self._run_lines("stock_in", len(lines), step, STOCK_IN_COLLECTIONS)

    async def submit_stock_out(
        self,
        lines: Sequence[StockOutLine],
        date: Optional[str] = None,
        operator: Optional[str] = None,
        customer: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> List[int]:
        """Record a cart of sales in order.

        Every line is checked against its snapshot before anything is written.
        """
        if not lines:
            raise ValidationError("Add at least one line")
        checked = [
            self._check_stock_out(line.quantity, line.selling_price, line.clothing_id, line.available_quantity)
            for line in lines
        ]

        async def step(session, index):
            quantity, price = checked[index]
            return await self._stock_out(
                session, lines[index].clothing_id, quantity, price, date, operator, customer, notes
            )

        return await self._run_lines("stock_out", len(lines), step, STOCK_OUT_COLLECTIONS)

    async def receive_variants(
        self,
        template: VariantTemplate,
        lines: Sequence[VariantLine],
        date: Optional[str] = None,
        operator: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> List[ReceivedLine]:
        """Stock in one model across several colors and sizes.

        Each color/size line reuses the clothing with the same code, color and
        size (refreshing its prices) or creates it.
        """
        code = _clean_text(template.code)
        name = _clean_text(template.name)
        if not code or not name:
            raise ValidationError("Code and name are required")
        purchase_price = _check_price(template.purchase_price, "Purchase price")
        selling_price = round_money(template.selling_price or 0)
        if selling_price < 0:
            raise ValidationError("Selling price cannot be negative")

        wanted = [line for line in lines if line.quantity and line.quantity > 0]
        if not wanted:
            raise ValidationError("Enter a quantity greater than 0 for at least one color and size")
        for line in wanted:
            _check_quantity(line.quantity)

        received: List[ReceivedLine] = []

        async def step(session, index):
            line = wanted[index]
            now = iso_now()
            existing = await find_variant(self.store, code, line.color, line.size, session)
            if existing is not None:
                clothing_id = existing["id"]
                await self.store.update(
                    "clothes",
                    clothing_id,
                    {"purchase_price": purchase_price, "selling_price": selling_price, "updated_at": now},
                    session=session,
                )
            else:
                clothing_id = await self.store.add(
                    "clothes",
                    {
                        "code": code,
                        "name": name,
                        "category": _clean_text(template.category),
                        "color": line.color,
                        "size": line.size,
                        "purchase_price": purchase_price,
                        "selling_price": selling_price,
                        "created_at": now,
                        "updated_at": now,
                    },
                    session=session,
                )
            stock_in_id = await self._stock_in(
                session, clothing_id, line.quantity, purchase_price, date, operator, notes
            )
            received.append(
                ReceivedLine(
                    clothing_id=clothing_id,
                    stock_in_id=stock_in_id,
                    color=line.color,
                    size=line.size,
                    quantity=line.quantity,
                    created=existing is None,
                )
            )
            return stock_in_id

        await self._run_lines("receive", len(wanted), step, STOCK_IN_COLLECTIONS)
        return received
