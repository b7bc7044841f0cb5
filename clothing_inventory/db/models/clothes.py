# clothing_inventory/db/models/clothes.py
from sqlalchemy import Column, Integer, Numeric, String

from clothing_inventory.db.base import Base


class Clothing(Base):
    __tablename__ = "clothes"

    """Catalog entry for one stock-keeping unit.

    A clothing row is one code/color/size combination with its current
    purchase and selling prices. The code is a user mnemonic and is not
    unique across rows: the same code usually spans several colors and sizes.
    """

    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True, index=True)
    size = Column(String, nullable=True, index=True)
    color = Column(String, nullable=True, index=True)

    purchase_price = Column(Numeric(18, 2, asdecimal=False), nullable=False, default=0)
    selling_price = Column(Numeric(18, 2, asdecimal=False), nullable=False, default=0)

    created_at = Column(String, nullable=True, index=True)
    updated_at = Column(String, nullable=True)
