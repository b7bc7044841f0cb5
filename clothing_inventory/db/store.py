"""Local Store: an embedded, versioned record store over async SQLAlchemy.

Records go in and come out as plain dicts keyed by column name. Every
operation accepts an optional ``session`` so that callers can group several
writes into one all-or-nothing unit with :meth:`LocalStore.transaction`;
without one, each call runs and commits on its own.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, insert, inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clothing_inventory.core.errors import StoreInitError, ValidationError
from clothing_inventory.core.observability import log_event
from clothing_inventory.core.utils import iso_now
from clothing_inventory.db.base import make_engine, make_session_factory
from clothing_inventory.db.schema import (
    COLLECTIONS,
    LATEST_SCHEMA_VERSION,
    SCHEMA_STEPS,
    read_schema_version,
    write_schema_version,
)

logger = logging.getLogger("clothing_inventory.store")

Record = Dict[str, Any]


class LocalStore:
    def __init__(self, db_url: str):
        self.db_url = db_url
        self.engine = make_engine(db_url)
        self._session_factory = make_session_factory(self.engine)
        self.schema_version: Optional[int] = None
        self.init_error: Optional[StoreInitError] = None

    @property
    def is_open(self) -> bool:
        return self.schema_version is not None

    async def open(self, schema_version: int = LATEST_SCHEMA_VERSION) -> int:
        """Create or upgrade the schema to ``schema_version``.

        Safe to call repeatedly. Existing rows are kept across upgrades.
        Raises :class:`StoreInitError` when the storage cannot be opened.
        """
        if schema_version < 1 or schema_version > LATEST_SCHEMA_VERSION:
            raise StoreInitError(f"Unsupported schema version {schema_version}")
        try:
            async with self.engine.begin() as conn:
                current = await conn.run_sync(read_schema_version)
                if current > schema_version:
                    raise StoreInitError(
                        f"Store is at schema version {current}, cannot open it at {schema_version}"
                    )
                for version, step in SCHEMA_STEPS:
                    if current < version <= schema_version:
                        await conn.run_sync(step)
                        log_event(logger, "store_upgrade", version=version)
                if current != schema_version:
                    await conn.run_sync(write_schema_version, schema_version, iso_now())
        except StoreInitError as exc:
            self.init_error = exc
            raise
        except (SQLAlchemyError, OSError) as exc:
            self.init_error = StoreInitError(f"Local storage is unavailable: {exc}")
            log_event(logger, "store_open_failed", logging.ERROR, url=self.db_url, error=str(exc))
            raise self.init_error from exc

        self.init_error = None
        self.schema_version = schema_version
        log_event(logger, "store_open", url=self.db_url, schema_version=schema_version)
        return schema_version

    async def close(self) -> None:
        await self.engine.dispose()
        self.schema_version = None

    def _ensure_open(self) -> None:
        if self.init_error is not None:
            raise self.init_error
        if not self.is_open:
            raise StoreInitError("Local store is not open")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Unit of work: everything done with the yielded session commits together."""
        self._ensure_open()
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    @asynccontextmanager
    async def _unit(self, session: Optional[AsyncSession]) -> AsyncIterator[AsyncSession]:
        if session is not None:
            yield session
        else:
            async with self.transaction() as own:
                yield own

    # ---- helpers ----

    @staticmethod
    def _model(collection: str):
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise ValidationError(f"Unknown collection '{collection}'") from None

    def _table(self, collection: str):
        return self._model(collection).__table__

    def _pk(self, collection: str):
        return inspect(self._model(collection)).primary_key[0]

    def _clean(self, collection: str, record: Record) -> Record:
        columns = self._table(collection).c
        return {k: v for k, v in record.items() if k in columns}

    # ---- reads ----

    async def get(self, collection: str, record_id, *, session: Optional[AsyncSession] = None) -> Optional[Record]:
        table = self._table(collection)
        async with self._unit(session) as s:
            row = (await s.execute(select(table).where(self._pk(collection) == record_id))).mappings().first()
        return dict(row) if row else None

    async def query(
        self,
        collection: str,
        *,
        session: Optional[AsyncSession] = None,
        limit: Optional[int] = None,
        **equals,
    ) -> List[Record]:
        table = self._table(collection)
        stmt = select(table)
        for field, value in equals.items():
            stmt = stmt.where(table.c[field] == value)
        stmt = stmt.order_by(self._pk(collection))
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._unit(session) as s:
            rows = (await s.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def first(self, collection: str, *, session: Optional[AsyncSession] = None, **equals) -> Optional[Record]:
        rows = await self.query(collection, session=session, limit=1, **equals)
        return rows[0] if rows else None

    async def all(self, collection: str, *, session: Optional[AsyncSession] = None) -> List[Record]:
        return await self.query(collection, session=session)

    async def count(self, collection: str, *, session: Optional[AsyncSession] = None) -> int:
        table = self._table(collection)
        async with self._unit(session) as s:
            return int((await s.execute(select(func.count()).select_from(table))).scalar_one())

    # ---- writes ----

    async def add(self, collection: str, record: Record, *, session: Optional[AsyncSession] = None):
        table = self._table(collection)
        async with self._unit(session) as s:
            result = await s.execute(insert(table).values(**self._clean(collection, record)))
            return result.inserted_primary_key[0]

    async def bulk_add(
        self,
        collection: str,
        records: Iterable[Record],
        *,
        session: Optional[AsyncSession] = None,
    ) -> list:
        table = self._table(collection)
        ids = []
        async with self._unit(session) as s:
            # one statement per record: records may carry different key sets
            for record in records:
                result = await s.execute(insert(table).values(**self._clean(collection, record)))
                ids.append(result.inserted_primary_key[0])
        return ids

    async def update(
        self,
        collection: str,
        record_id,
        partial: Record,
        *,
        session: Optional[AsyncSession] = None,
    ) -> bool:
        values = self._clean(collection, partial)
        if not values:
            return await self.get(collection, record_id, session=session) is not None
        table = self._table(collection)
        async with self._unit(session) as s:
            result = await s.execute(update(table).where(self._pk(collection) == record_id).values(**values))
        return result.rowcount > 0

    async def increment(
        self,
        collection: str,
        record_id,
        field: str,
        delta,
        *,
        floor=None,
        extra: Optional[Record] = None,
        session: Optional[AsyncSession] = None,
    ) -> bool:
        """Add ``delta`` to ``field`` in a single statement.

        With ``floor``, the row is only touched when the new value stays at or
        above it. Returns whether a row was updated.
        """
        table = self._table(collection)
        column = table.c[field]
        values = {field: column + delta}
        values.update(self._clean(collection, extra or {}))
        stmt = update(table).where(self._pk(collection) == record_id).values(**values)
        if floor is not None:
            stmt = stmt.where(column + delta >= floor)
        async with self._unit(session) as s:
            result = await s.execute(stmt)
        return result.rowcount > 0

    async def delete(self, collection: str, record_id, *, session: Optional[AsyncSession] = None) -> bool:
        table = self._table(collection)
        async with self._unit(session) as s:
            result = await s.execute(delete(table).where(self._pk(collection) == record_id))
        return result.rowcount > 0

    async def delete_many(self, collection: str, record_ids: Iterable, *, session: Optional[AsyncSession] = None) -> int:
        ids = list(record_ids)
        if not ids:
            return 0
        table = self._table(collection)
        async with self._unit(session) as s:
            result = await s.execute(delete(table).where(self._pk(collection).in_(ids)))
        return result.rowcount

    async def delete_where(self, collection: str, *, session: Optional[AsyncSession] = None, **equals) -> int:
        table = self._table(collection)
        stmt = delete(table)
        for field, value in equals.items():
            stmt = stmt.where(table.c[field] == value)
        async with self._unit(session) as s:
            result = await s.execute(stmt)
        return result.rowcount

    async def clear(self, collection: str, *, session: Optional[AsyncSession] = None) -> int:
        table = self._table(collection)
        async with self._unit(session) as s:
            result = await s.execute(delete(table))
        return result.rowcount

    async def replace_all(
        self,
        collection: str,
        records: Iterable[Record],
        *,
        session: Optional[AsyncSession] = None,
    ) -> int:
        """Full replace: clear the collection then insert ``records`` as given."""
        records = list(records)
        async with self._unit(session) as s:
            await self.clear(collection, session=s)
            await self.bulk_add(collection, records, session=s)
        return len(records)
