# clothing_inventory/domain/inventory/schemas.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StockInCreate(_Body):
    clothing_id: int
    quantity: int
    purchase_price: float
    date: Optional[str] = None
    operator: Optional[str] = None
    notes: Optional[str] = None


class StockOutCreate(_Body):
    clothing_id: int
    quantity: int
    selling_price: float
    date: Optional[str] = None
    operator: Optional[str] = None
    customer: Optional[str] = None
    notes: Optional[str] = None
    # quantity the caller saw when the form was filled in
    available_quantity: Optional[int] = None


class StockInLine(_Body):
    clothing_id: int
    quantity: int
    purchase_price: float


class StockOutLine(_Body):
    clothing_id: int
    quantity: int
    selling_price: float
    available_quantity: Optional[int] = None


class StockInBatch(_Body):
    lines: List[StockInLine] = Field(min_length=1)
    date: Optional[str] = None
    operator: Optional[str] = None
    notes: Optional[str] = None


class StockOutBatch(_Body):
    lines: List[StockOutLine] = Field(min_length=1)
    date: Optional[str] = None
    operator: Optional[str] = None
    customer: Optional[str] = None
    notes: Optional[str] = None


class VariantTemplate(_Body):
    code: str
    name: str
    category: Optional[str] = None
    purchase_price: float
    selling_price: float = 0


class VariantLine(_Body):
    color: str
    size: str
    quantity: int


class ReceiveVariants(_Body):
    template: VariantTemplate
    lines: List[VariantLine] = Field(min_length=1)
    date: Optional[str] = None
    operator: Optional[str] = None
    notes: Optional[str] = None


class MovementOut(_Body):
    id: int
    clothing_id: int
    quantity: int
    total_amount: float
    remaining_quantity: int


class BatchOut(_Body):
    ids: List[int]
    total_amount: float


class ReceivedLine(_Body):
    clothing_id: int
    stock_in_id: int
    color: str
    size: str
    quantity: int
    created: bool


class ReceiveOut(_Body):
    lines: List[ReceivedLine]
