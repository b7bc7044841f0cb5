# clothing_inventory/domain/catalog/schemas.py
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ClothingCreate(BaseModel):
    code: str
    name: str
    category: str
    size: str
    color: str
    purchase_price: float = 0
    selling_price: float = 0
    quantity: int = 0

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClothingUpdate(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    purchase_price: Optional[float] = None
    selling_price: Optional[float] = None
    # direct inventory edit, outside the stock-in/stock-out arithmetic
    quantity: Optional[int] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClothingOut(BaseModel):
    id: int
    code: str
    name: str
    category: Optional[str]
    size: Optional[str]
    color: Optional[str]
    purchase_price: float
    selling_price: float
    quantity: int
    created_at: Optional[str]
    updated_at: Optional[str]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
