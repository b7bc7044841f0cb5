from clothing_inventory.core.errors import ValidationError
from clothing_inventory.db.store import LocalStore

from .schemas import Preferences, PreferencesUpdate

LOW_STOCK_THRESHOLD = "lowStockThreshold"
SOUND_ENABLED = "soundEnabled"


class PreferencesService:
    """Key/value UI preferences kept in the ``settings`` collection."""

    def __init__(self, store: LocalStore, *, default_threshold: int = 10, default_sound: bool = True):
        self.store = store
        self.default_threshold = default_threshold
        self.default_sound = default_sound

    async def _get(self, key: str, default):
        row = await self.store.get("settings", key)
        if row is None or row["value"] is None:
            return default
        return row["value"]

    async def _put(self, key: str, value) -> None:
        async with self.store.transaction() as session:
            if not await self.store.update("settings", key, {"value": value}, session=session):
                await self.store.add("settings", {"key": key, "value": value}, session=session)

    async def low_stock_threshold(self) -> int:
        value = await self._get(LOW_STOCK_THRESHOLD, self.default_threshold)
        try:
            return int(value)
        except (TypeError, ValueError):
            return self.default_threshold

    async def sound_enabled(self) -> bool:
        return bool(await self._get(SOUND_ENABLED, self.default_sound))

    async def get_preferences(self) -> Preferences:
        return Preferences(
            low_stock_threshold=await self.low_stock_threshold(),
            sound_enabled=await self.sound_enabled(),
        )

    async def update_preferences(self, data: PreferencesUpdate) -> Preferences:
        if data.low_stock_threshold is not None:
            if data.low_stock_threshold < 0:
                raise ValidationError("Low stock threshold must be a whole number of 0 or more")
            await self._put(LOW_STOCK_THRESHOLD, data.low_stock_threshold)
        if data.sound_enabled is not None:
            await self._put(SOUND_ENABLED, data.sound_enabled)
        return await self.get_preferences()
