from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from sqlalchemy import Column, Integer, MetaData, Numeric, String, Table, Text, inspect, text
from sqlalchemy.engine import Connection

from clothing_inventory.db.base import Base
from clothing_inventory.db.models.clothes import Clothing
from clothing_inventory.db.models.inventory import Inventory
from clothing_inventory.db.models.settings import Setting
from clothing_inventory.db.models.stock_in import StockIn
from clothing_inventory.db.models.stock_out import StockOut
from clothing_inventory.db.models.store_meta import StoreMeta
from clothing_inventory.db.models.sync_cursors import SyncCursor

# Collection name -> ORM model. Names match the wire/backup format.
COLLECTIONS: Dict[str, type] = {
    "clothes": Clothing,
    "inventory": Inventory,
    "stockIn": StockIn,
    "stockOut": StockOut,
    "settings": Setting,
    "syncCursors": SyncCursor,
}

SYNCED_COLLECTIONS: Tuple[str, ...] = ("clothes", "inventory", "stockIn", "stockOut")

LATEST_SCHEMA_VERSION = 4
META_ROW = "local"


def _column_exists(conn: Connection, table: str, column: str) -> bool:
    return column in {c["name"] for c in inspect(conn).get_columns(table)}


# stock_out as first shipped, before sales carried updated_at
_STOCK_OUT_V1 = Table(
    "stock_out",
    MetaData(),
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("clothing_id", Integer, nullable=False, index=True),
    Column("quantity", Integer, nullable=False),
    Column("selling_price", Numeric(18, 2, asdecimal=False), nullable=False),
    Column("total_amount", Numeric(18, 2, asdecimal=False), nullable=False),
    Column("date", String, nullable=True, index=True),
    Column("operator", String, nullable=True, index=True),
    Column("customer", String, nullable=True, index=True),
    Column("notes", Text, nullable=True),
    Column("created_at", String, nullable=True),
    sqlite_autoincrement=True,
)


def _v1_core_collections(conn: Connection) -> None:
    Base.metadata.create_all(conn, tables=[Clothing.__table__, Inventory.__table__, StockIn.__table__])
    _STOCK_OUT_V1.create(conn, checkfirst=True)


def _v2_settings(conn: Connection) -> None:
    Base.metadata.create_all(conn, tables=[Setting.__table__])


def _v3_sync_metadata(conn: Connection) -> None:
    # stock_out rows written before v3 have no updated_at column
    if not _column_exists(conn, "stock_out", "updated_at"):
        conn.execute(text("ALTER TABLE stock_out ADD COLUMN updated_at VARCHAR"))
    Base.metadata.create_all(conn, tables=[SyncCursor.__table__])


# History tables that keep pointing at a clothing id after the clothing is gone.
_CLOTHING_REFERENCES = (("inventory", "clothing_id"), ("stock_in", "clothing_id"), ("stock_out", "clothing_id"))


def _uses_autoincrement(conn: Connection, table: str) -> bool:
    sql = conn.execute(
        text("SELECT sql FROM sqlite_master WHERE type = 'table' AND name = :name"), {"name": table}
    ).scalar()
    return sql is None or "AUTOINCREMENT" in sql.upper()


def _rebuild_with_autoincrement(conn: Connection, table: Table) -> None:
    legacy = f"{table.name}_legacy"
    columns = [c["name"] for c in inspect(conn).get_columns(table.name) if c["name"] in table.c]
    for index in inspect(conn).get_indexes(table.name):
        conn.execute(text(f'DROP INDEX "{index["name"]}"'))
    conn.execute(text(f'ALTER TABLE "{table.name}" RENAME TO "{legacy}"'))
    table.create(conn)
    names = ", ".join(f'"{name}"' for name in columns)
    conn.execute(text(f'INSERT INTO "{table.name}" ({names}) SELECT {names} FROM "{legacy}"'))
    conn.execute(text(f'DROP TABLE "{legacy}"'))


def _raise_id_floor(conn: Connection, table: str, floor: int) -> None:
    seq = conn.execute(text("SELECT seq FROM sqlite_sequence WHERE name = :name"), {"name": table}).scalar()
    if seq is None:
        conn.execute(text("INSERT INTO sqlite_sequence (name, seq) VALUES (:name, :seq)"), {"name": table, "seq": floor})
    elif seq < floor:
        conn.execute(text("UPDATE sqlite_sequence SET seq = :seq WHERE name = :name"), {"name": table, "seq": floor})


def _v4_monotonic_ids(conn: Connection) -> None:
    # earlier stores let SQLite hand out max(id) + 1, so a deleted top id came back
    for model in (Clothing, Inventory, StockIn, StockOut):
        if not _uses_autoincrement(conn, model.__tablename__):
            _rebuild_with_autoincrement(conn, model.__table__)

    # a clothing id still referenced by orphaned history is never handed out again
    floor = 0
    for table, column in _CLOTHING_REFERENCES + (("clothes", "id"),):
        floor = max(floor, conn.execute(text(f'SELECT COALESCE(MAX("{column}"), 0) FROM "{table}"')).scalar())
    if floor:
        _raise_id_floor(conn, "clothes", floor)


SCHEMA_STEPS: List[Tuple[int, Callable[[Connection], None]]] = [
    (1, _v1_core_collections),
    (2, _v2_settings),
    (3, _v3_sync_metadata),
    (4, _v4_monotonic_ids),
]


def read_schema_version(conn: Connection) -> int:
    StoreMeta.__table__.create(conn, checkfirst=True)
    row = conn.execute(
        StoreMeta.__table__.select().where(StoreMeta.__table__.c.name == META_ROW)
    ).mappings().first()
    return int(row["schema_version"]) if row else 0


def write_schema_version(conn: Connection, version: int, upgraded_at: str) -> None:
    table = StoreMeta.__table__
    updated = conn.execute(
        table.update()
        .where(table.c.name == META_ROW)
        .values(schema_version=version, upgraded_at=upgraded_at)
    )
    if updated.rowcount == 0:
        conn.execute(table.insert().values(name=META_ROW, schema_version=version, upgraded_at=upgraded_at))
