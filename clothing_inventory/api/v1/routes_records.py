from typing import Optional

from fastapi import APIRouter, Depends

from clothing_inventory.api.deps import get_context
from clothing_inventory.context import AppContext
from clothing_inventory.domain.records.schemas import BulkDelete, BulkDeleteResult, RecordPage

router = APIRouter(prefix="/api/v1/records", tags=["records"])


@router.get("/{collection}", response_model=RecordPage)
async def list_records_endpoint(
    collection: str,
    search: Optional[str] = None,
    ctx: AppContext = Depends(get_context),
):
    return await ctx.records.list_records(collection, search=search)


@router.post("/{collection}/delete", response_model=BulkDeleteResult)
async def delete_records_endpoint(
    collection: str,
    payload: BulkDelete,
    ctx: AppContext = Depends(get_context),
):
    return await ctx.records.delete_records(collection, payload.ids)
