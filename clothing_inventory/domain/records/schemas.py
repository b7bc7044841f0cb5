# clothing_inventory/domain/records/schemas.py
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RecordModel(BaseModel):
    """Wire shape of a stored record: camelCase outside, snake_case inside."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_row(self) -> Dict[str, Any]:
        row = self.model_dump()
        if row.get("id") is None:
            row.pop("id", None)
        return row

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ClothingRecord(RecordModel):
    id: Optional[int] = None
    code: str
    name: str
    category: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    purchase_price: float = 0
    selling_price: float = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class InventoryRecord(RecordModel):
    id: Optional[int] = None
    clothing_id: int
    quantity: int = 0
    updated_at: Optional[str] = None


class StockInRecord(RecordModel):
    id: Optional[int] = None
    clothing_id: int
    quantity: int
    purchase_price: float = 0
    total_amount: float = 0
    date: Optional[str] = None
    operator: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None


class StockOutRecord(RecordModel):
    id: Optional[int] = None
    clothing_id: int
    quantity: int
    selling_price: float = 0
    total_amount: float = 0
    date: Optional[str] = None
    operator: Optional[str] = None
    customer: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


RECORD_SCHEMAS: Dict[str, Type[RecordModel]] = {
    "clothes": ClothingRecord,
    "inventory": InventoryRecord,
    "stockIn": StockInRecord,
    "stockOut": StockOutRecord,
}


def rows_to_wire(collection: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    schema = RECORD_SCHEMAS[collection]
    return [schema.model_validate(row).to_wire() for row in rows]


def wire_to_rows(collection: str, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Validate wire records; raises ``pydantic.ValidationError`` on bad shapes."""
    schema = RECORD_SCHEMAS[collection]
    return [schema.model_validate(record).to_row() for record in records]


class RecordView(BaseModel):
    """A data viewer row: the raw record plus the clothing it points at."""

    collection: str
    record: Dict[str, Any]
    clothing_code: str
    clothing_name: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecordPage(BaseModel):
    collection: str
    total: int
    shown: int
    records: List[RecordView]


class BulkDelete(BaseModel):
    ids: List[int]


class BulkDeleteResult(BaseModel):
    collection: str
    deleted: int
