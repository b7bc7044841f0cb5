from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Out(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SalesByDate(_Out):
    date: str
    sales: float
    profit: float
    quantity: int


class SalesByProduct(_Out):
    clothing_id: int
    code: str
    name: str
    sales: float
    quantity: int
    profit: float


class PurchasesByDate(_Out):
    date: str
    amount: float
    quantity: int


class SalesSummary(_Out):
    total: float
    total_profit: float
    total_quantity: int
    by_date: List[SalesByDate]
    by_product: List[SalesByProduct]


class PurchasesSummary(_Out):
    total: float
    total_quantity: int
    by_date: List[PurchasesByDate]


class InventoryValue(_Out):
    total_products: int
    total_value: float


class SalesReport(_Out):
    start: str
    end: str
    sales: SalesSummary
    purchases: PurchasesSummary
    inventory: InventoryValue


class InventoryItem(_Out):
    inventory_id: int
    clothing_id: int
    code: str
    name: str
    category: Optional[str]
    size: Optional[str]
    color: Optional[str]
    purchase_price: float
    selling_price: float
    quantity: int
    total_value: float
    status: str


class InventoryOverview(_Out):
    threshold: int
    total_items: int
    total_quantity: int
    total_value: float
    items: List[InventoryItem]
    low_stock: List[InventoryItem]
    out_of_stock: List[InventoryItem]


class DashboardStats(_Out):
    total_clothes: int
    total_value: float
    low_stock_items: int
