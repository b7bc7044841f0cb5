from sqlalchemy import Column, Integer, String

from clothing_inventory.db.base import Base


class Inventory(Base):
    __tablename__ = "inventory"

    """On-hand quantity for one clothing row.

    There is one row per clothing by convention only: lookups go through
    ``clothing_id`` and take the first match.
    """

    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    clothing_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=0, index=True)

    updated_at = Column(String, nullable=True, index=True)
