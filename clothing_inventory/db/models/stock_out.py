from sqlalchemy import Column, Integer, Numeric, String, Text

from clothing_inventory.db.base import Base


class StockOut(Base):
    __tablename__ = "stock_out"

    """Sale transaction, append-only like :class:`StockIn`."""

    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    clothing_id = Column(Integer, nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    selling_price = Column(Numeric(18, 2, asdecimal=False), nullable=False)
    total_amount = Column(Numeric(18, 2, asdecimal=False), nullable=False)

    date = Column(String, nullable=True, index=True)
    operator = Column(String, nullable=True, index=True)
    customer = Column(String, nullable=True, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(String, nullable=True)
    updated_at = Column(String, nullable=True)
