
from sqlalchemy import Column, Integer, String

from clothing_inventory.db.base import Base


class SyncCursor(Base):
    __tablename__ = "sync_cursors"

    """Tracks progress of the remote mirroring stream.

    A sync cursor stores when the last full pull+push cycle completed and how
    many local mutations happened while the remote was unreachable. The
    counter is advisory: the next sync always re-pushes everything.
    """

    id = Column(Integer, primary_key=True, autoincrement=True)
    stream_name = Column(String, nullable=False, unique=True)

    last_synced_at = Column(String, nullable=True)
    offline_changes = Column(Integer, nullable=False, default=0)

    created_at = Column(String, nullable=True)
    updated_at = Column(String, nullable=True)
