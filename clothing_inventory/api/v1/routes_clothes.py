# clothing_inventory/api/v1/routes_clothes.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from clothing_inventory.api.deps import get_context
from clothing_inventory.context import AppContext
from clothing_inventory.domain.catalog.schemas import ClothingCreate, ClothingOut, ClothingUpdate

router = APIRouter(prefix="/api/v1/clothes", tags=["clothes"])


@router.get("", response_model=List[ClothingOut])
async def list_clothes_endpoint(
    search: Optional[str] = None,
    category: Optional[str] = None,
    ctx: AppContext = Depends(get_context),
):
    return await ctx.catalog.list_clothes(search=search, category=category)


@router.get("/categories", response_model=List[str])
async def list_categories_endpoint(ctx: AppContext = Depends(get_context)):
    return await ctx.catalog.categories()


@router.get("/{clothing_id}", response_model=ClothingOut)
async def get_clothing_endpoint(clothing_id: int, ctx: AppContext = Depends(get_context)):
    return await ctx.catalog.get_clothing(clothing_id)


@router.post("", response_model=ClothingOut, status_code=201)
async def create_clothing_endpoint(payload: ClothingCreate, ctx: AppContext = Depends(get_context)):
    return await ctx.catalog.create_clothing(payload)


@router.patch("/{clothing_id}", response_model=ClothingOut)
async def update_clothing_endpoint(
    clothing_id: int,
    payload: ClothingUpdate,
    ctx: AppContext = Depends(get_context),
):
    return await ctx.catalog.update_clothing(clothing_id, payload)


@router.delete("/{clothing_id}", status_code=204)
async def delete_clothing_endpoint(clothing_id: int, ctx: AppContext = Depends(get_context)):
    # stock history rows for this clothing are kept
    await ctx.catalog.delete_clothing(clothing_id)
    return Response(status_code=204)
