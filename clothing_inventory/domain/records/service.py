import logging
from typing import Iterable, Optional

from clothing_inventory.core.errors import ValidationError
from clothing_inventory.core.observability import log_event
from clothing_inventory.db.repositories.clothes import clothes_by_id
from clothing_inventory.db.schema import SYNCED_COLLECTIONS
from clothing_inventory.db.store import LocalStore
from clothing_inventory.domain.changes import ChangeNotifier

from .schemas import RECORD_SCHEMAS, BulkDeleteResult, RecordPage, RecordView

logger = logging.getLogger("clothing_inventory.records")

NOT_FOUND = "Not found"


def _check_collection(collection: str) -> None:
    if collection not in SYNCED_COLLECTIONS:
        raise ValidationError(
            f"Unknown collection '{collection}'", details={"allowed": list(SYNCED_COLLECTIONS)}
        )


class RecordsService:
    """Raw table browser over the four synced collections."""

    def __init__(self, store: LocalStore, changes: Optional[ChangeNotifier] = None):
        self.store = store
        self.changes = changes or ChangeNotifier()

    async def list_records(self, collection: str, search: Optional[str] = None) -> RecordPage:
        _check_collection(collection)
        schema = RECORD_SCHEMAS[collection]
        clothes = await clothes_by_id(self.store)
        rows = await self.store.all(collection)
        term = (search or "").strip().lower()

        views = []
        for row in rows:
            clothing_id = row["id"] if collection == "clothes" else row["clothing_id"]
            clothing = clothes.get(clothing_id)
            record = schema.model_validate(row).to_wire()
            view = RecordView(
                collection=collection,
                record=record,
                clothing_code=clothing["code"] if clothing else NOT_FOUND,
                clothing_name=clothing["name"] if clothing else NOT_FOUND,
            )
            if term:
                haystack = " ".join(str(v) for v in record.values() if v is not None)
                haystack = f"{haystack} {view.clothing_code} {view.clothing_name}".lower()
                if term not in haystack:
                    continue
            views.append(view)
        return RecordPage(collection=collection, total=len(rows), shown=len(views), records=views)

    async def delete_records(self, collection: str, ids: Iterable[int]) -> BulkDeleteResult:
        """Delete rows by id. Inventory is not adjusted for deleted movements."""
        _check_collection(collection)
        ids = list(ids)
        if not ids:
            raise ValidationError("Select at least one record to delete")
        deleted = await self.store.delete_many(collection, ids)
        log_event(logger, "records_deleted", collection=collection, requested=len(ids), deleted=deleted)
        if deleted:
            await self.changes.notify((collection,))
        return BulkDeleteResult(collection=collection, deleted=deleted)
