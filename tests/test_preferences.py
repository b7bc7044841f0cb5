import pytest

from clothing_inventory.core.errors import ValidationError
from clothing_inventory.domain.preferences.schemas import PreferencesUpdate

pytestmark = pytest.mark.anyio


async def test_defaults_when_nothing_stored(preferences):
    prefs = await preferences.get_preferences()
    assert prefs.low_stock_threshold == 10
    assert prefs.sound_enabled is True


async def test_update_is_persisted(store, preferences):
    await preferences.update_preferences(PreferencesUpdate(low_stock_threshold=3))
    prefs = await preferences.update_preferences(PreferencesUpdate(sound_enabled=False))

    assert prefs.low_stock_threshold == 3
    assert prefs.sound_enabled is False
    assert (await store.get("settings", "lowStockThreshold"))["value"] == 3

    await preferences.update_preferences(PreferencesUpdate(low_stock_threshold=0))
    assert await preferences.low_stock_threshold() == 0
    assert await store.count("settings") == 2


async def test_negative_threshold_is_rejected(preferences):
    with pytest.raises(ValidationError):
        await preferences.update_preferences(PreferencesUpdate(low_stock_threshold=-1))
    assert await preferences.low_stock_threshold() == 10


async def test_unreadable_threshold_falls_back_to_default(store, preferences):
    await store.add("settings", {"key": "lowStockThreshold", "value": "many"})
    assert await preferences.low_stock_threshold() == 10
