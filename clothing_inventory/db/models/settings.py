from sqlalchemy import JSON, Column, String

from clothing_inventory.db.base import Base


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)
