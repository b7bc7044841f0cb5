# clothing_inventory/domain/reports/service.py
import logging
from collections import OrderedDict
from typing import Dict, Optional

from clothing_inventory.core.errors import ValidationError
from clothing_inventory.core.observability import log_event
from clothing_inventory.core.utils import date_part, round_money
from clothing_inventory.db.repositories.clothes import clothes_by_id
from clothing_inventory.db.store import LocalStore, Record
from clothing_inventory.domain.preferences.service import PreferencesService

from .schemas import (
    DashboardStats,
    InventoryItem,
    InventoryOverview,
    InventoryValue,
    PurchasesByDate,
    PurchasesSummary,
    SalesByDate,
    SalesByProduct,
    SalesReport,
    SalesSummary,
)

logger = logging.getLogger("clothing_inventory.reports")

OUT_OF_STOCK = "out_of_stock"
LOW = "low"
NORMAL = "normal"


def stock_status(quantity: int, threshold: int) -> str:
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity <= threshold:
        return LOW
    return NORMAL


def _inventory_value(inventory, clothes: Dict[int, Record]) -> float:
    total = 0.0
    for inv in inventory:
        clothing = clothes.get(inv["clothing_id"])
        if clothing is not None:
            total += (inv["quantity"] or 0) * (clothing["purchase_price"] or 0)
    return round_money(total)


class ReportsService:
    def __init__(self, store: LocalStore, preferences: PreferencesService):
        self.store = store
        self.preferences = preferences

    async def sales_report(self, start: str, end: str) -> SalesReport:
        """Sales, profit and purchases between two dates, both inclusive.

        Profit uses the clothing's current purchase price and is only counted
        for sales whose clothing still exists with a positive price.
        """
        if not start or not end:
            raise ValidationError("Both start and end dates are required")
        if start > end:
            raise ValidationError("Start date must not be after end date")

        def in_range(row: Record) -> bool:
            return start <= date_part(row["date"]) <= end

        stock_out = [r for r in await self.store.all("stockOut") if in_range(r)]
        stock_in = [r for r in await self.store.all("stockIn") if in_range(r)]
        clothes = await clothes_by_id(self.store)

        by_date: "OrderedDict[str, dict]" = OrderedDict()
        by_product: "OrderedDict[int, dict]" = OrderedDict()
        total_sales = 0.0
        total_profit = 0.0

        for record in stock_out:
            amount = record["total_amount"] or 0
            quantity = record["quantity"] or 0
            if amount <= 0:
                log_event(logger, "report_skipped_sale", logging.WARNING, stock_out_id=record["id"])
                continue
            total_sales += amount

            day = by_date.setdefault(record["date"] or "unknown", {"sales": 0.0, "profit": 0.0, "quantity": 0})
            day["sales"] += amount
            day["quantity"] += quantity

            clothing = clothes.get(record["clothing_id"])
            if clothing is None or not clothing["purchase_price"] or clothing["purchase_price"] <= 0 or quantity <= 0:
                continue
            profit = amount - quantity * clothing["purchase_price"]
            day["profit"] += profit
            total_profit += profit

            product = by_product.setdefault(
                record["clothing_id"],
                {"code": clothing["code"], "name": clothing["name"], "sales": 0.0, "quantity": 0, "profit": 0.0},
            )
            product["sales"] += amount
            product["quantity"] += quantity
            product["profit"] += profit

        purchases: "OrderedDict[str, dict]" = OrderedDict()
        total_purchases = 0.0
        for record in stock_in:
            day = purchases.setdefault(record["date"] or "unknown", {"amount": 0.0, "quantity": 0})
            day["amount"] += record["total_amount"] or 0
            day["quantity"] += record["quantity"] or 0
            total_purchases += record["total_amount"] or 0

        inventory = await self.store.all("inventory")
        return SalesReport(
            start=start,
            end=end,
            sales=SalesSummary(
                total=round_money(total_sales),
                total_profit=round_money(total_profit),
                total_quantity=sum(r["quantity"] or 0 for r in stock_out),
                by_date=[
                    SalesByDate(
                        date=d,
                        sales=round_money(v["sales"]),
                        profit=round_money(v["profit"]),
                        quantity=v["quantity"],
                    )
                    for d, v in sorted(by_date.items())
                ],
                by_product=[
                    SalesByProduct(
                        clothing_id=cid,
                        code=v["code"],
                        name=v["name"],
                        sales=round_money(v["sales"]),
                        quantity=v["quantity"],
                        profit=round_money(v["profit"]),
                    )
                    for cid, v in by_product.items()
                ],
            ),
            purchases=PurchasesSummary(
                total=round_money(total_purchases),
                total_quantity=sum(r["quantity"] or 0 for r in stock_in),
                by_date=[
                    PurchasesByDate(date=d, amount=round_money(v["amount"]), quantity=v["quantity"])
                    for d, v in sorted(purchases.items())
                ],
            ),
            inventory=InventoryValue(total_products=len(clothes), total_value=_inventory_value(inventory, clothes)),
        )

    async def inventory_overview(self, search: Optional[str] = None) -> InventoryOverview:
        threshold = await self.preferences.low_stock_threshold()
        clothes = await clothes_by_id(self.store)
        term = (search or "").strip().lower()

        items = []
        for inv in await self.store.all("inventory"):
            clothing = clothes.get(inv["clothing_id"])
            if clothing is None:
                # inventory left behind by a deleted clothing
                continue
            if term and not any(term in str(clothing[f] or "").lower() for f in ("code", "name", "category")):
                continue
            quantity = inv["quantity"] or 0
            items.append(
                InventoryItem(
                    inventory_id=inv["id"],
                    clothing_id=clothing["id"],
                    code=clothing["code"],
                    name=clothing["name"],
                    category=clothing["category"],
                    size=clothing["size"],
                    color=clothing["color"],
                    purchase_price=clothing["purchase_price"] or 0,
                    selling_price=clothing["selling_price"] or 0,
                    quantity=quantity,
                    total_value=round_money(quantity * (clothing["purchase_price"] or 0)),
                    status=stock_status(quantity, threshold),
                )
            )

        return InventoryOverview(
            threshold=threshold,
            total_items=len(items),
            total_quantity=sum(i.quantity for i in items),
            total_value=round_money(sum(i.total_value for i in items)),
            items=items,
            low_stock=[i for i in items if i.status == LOW],
            out_of_stock=[i for i in items if i.status == OUT_OF_STOCK],
        )

    async def dashboard(self) -> DashboardStats:
        threshold = await self.preferences.low_stock_threshold()
        clothes = await clothes_by_id(self.store)
        inventory = await self.store.all("inventory")
        low = sum(
            1
            for inv in inventory
            if inv["clothing_id"] in clothes and stock_status(inv["quantity"] or 0, threshold) == LOW
        )
        return DashboardStats(
            total_clothes=len(clothes),
            total_value=_inventory_value(inventory, clothes),
            low_stock_items=low,
        )
