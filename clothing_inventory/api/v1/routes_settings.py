from fastapi import APIRouter, Depends

from clothing_inventory.api.deps import get_context
from clothing_inventory.context import AppContext
from clothing_inventory.domain.preferences.schemas import Preferences, PreferencesUpdate

router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


@router.get("", response_model=Preferences)
async def get_settings_endpoint(ctx: AppContext = Depends(get_context)):
    return await ctx.preferences.get_preferences()


@router.put("", response_model=Preferences)
async def update_settings_endpoint(payload: PreferencesUpdate, ctx: AppContext = Depends(get_context)):
    return await ctx.preferences.update_preferences(payload)
