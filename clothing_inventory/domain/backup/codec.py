"""Manual JSON export/import of the four synced collections.

The file is a UTF-8 JSON object::

    {"version": "1.0", "timestamp": "<ISO-8601>",
     "data": {"clothes": [...], "inventory": [...], "stockIn": [...], "stockOut": [...]}}

Import overwrites local data unconditionally, but only after the whole file
has been parsed and every record validated.
"""
import json
import logging
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from clothing_inventory.core.errors import InvalidBackupFormatError
from clothing_inventory.core.observability import log_event
from clothing_inventory.core.utils import iso_now, iso_today
from clothing_inventory.db.schema import SYNCED_COLLECTIONS
from clothing_inventory.db.store import LocalStore
from clothing_inventory.domain.changes import ChangeNotifier
from clothing_inventory.domain.records.schemas import rows_to_wire, wire_to_rows

from .schemas import BackupData, BackupDocument, ImportResult

logger = logging.getLogger("clothing_inventory.backup")


class BackupCodec:
    def __init__(self, store: LocalStore, changes: Optional[ChangeNotifier] = None, *, version: str = "1.0"):
        self.store = store
        self.changes = changes or ChangeNotifier()
        self.version = version

    async def export_document(self) -> BackupDocument:
        data = {}
        async with self.store.transaction() as session:
            for collection in SYNCED_COLLECTIONS:
                data[collection] = rows_to_wire(collection, await self.store.all(collection, session=session))
        return BackupDocument(version=self.version, timestamp=iso_now(), data=BackupData(**data))

    async def export_json(self) -> str:
        document = await self.export_document()
        log_event(
            logger,
            "backup_exported",
            counts={name: len(getattr(document.data, name)) for name in SYNCED_COLLECTIONS},
        )
        return json.dumps(document.model_dump(), ensure_ascii=False, indent=2)

    @staticmethod
    def filename() -> str:
        return f"clothing-inventory-backup_{iso_today()}.json"

    @staticmethod
    def parse(raw: Union[str, bytes]) -> dict:
        """Check the envelope and every record; returns rows ready to insert."""
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8-sig")
            except UnicodeDecodeError:
                raise InvalidBackupFormatError("Backup file is not UTF-8 text") from None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidBackupFormatError(f"Backup file is not valid JSON: {exc.msg}") from None

        if not isinstance(payload, dict) or "version" not in payload or "data" not in payload:
            raise InvalidBackupFormatError("Invalid backup file: missing version or data")
        data = payload["data"]
        if not isinstance(data, dict):
            raise InvalidBackupFormatError("Invalid backup file: data must be an object")

        rows = {}
        for collection in SYNCED_COLLECTIONS:
            records = data.get(collection)
            if records is None:
                continue
            if not isinstance(records, list):
                raise InvalidBackupFormatError(f"Invalid backup file: {collection} must be a list")
            try:
                rows[collection] = wire_to_rows(collection, records)
            except PydanticValidationError as exc:
                raise InvalidBackupFormatError(
                    f"Invalid backup file: bad record in {collection}",
                    details=exc.errors(include_url=False, include_context=False, include_input=False),
                ) from None
        return {"version": str(payload["version"]), "rows": rows}

    async def import_json(self, raw: Union[str, bytes]) -> ImportResult:
        parsed = self.parse(raw)
        rows = parsed["rows"]

        async with self.store.transaction() as session:
            for collection in SYNCED_COLLECTIONS:
                await self.store.clear(collection, session=session)
            for collection, records in rows.items():
                await self.store.bulk_add(collection, records, session=session)

        counts = {collection: len(rows.get(collection, [])) for collection in SYNCED_COLLECTIONS}
        log_event(logger, "backup_imported", version=parsed["version"], counts=counts)
        await self.changes.notify(SYNCED_COLLECTIONS)
        return ImportResult(version=parsed["version"], counts=counts)
