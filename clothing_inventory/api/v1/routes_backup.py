from fastapi import APIRouter, Depends, Request, Response

from clothing_inventory.api.deps import get_context
from clothing_inventory.context import AppContext
from clothing_inventory.domain.backup.schemas import ImportResult

router = APIRouter(prefix="/api/v1/backup", tags=["backup"])


@router.get("/export")
async def export_backup_endpoint(ctx: AppContext = Depends(get_context)):
    body = await ctx.backup.export_json()
    return Response(
        content=body.encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{ctx.backup.filename()}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_backup_endpoint(request: Request, ctx: AppContext = Depends(get_context)):
    # raw file body; the codec does its own parsing and validation
    return await ctx.backup.import_json(await request.body())
