from sqlalchemy import Column, Integer, String

from clothing_inventory.db.base import Base


class StoreMeta(Base):
    __tablename__ = "store_meta"

    """Single-row table recording the schema version the store was opened at."""

    name = Column(String, primary_key=True)
    schema_version = Column(Integer, nullable=False)
    upgraded_at = Column(String, nullable=True)
