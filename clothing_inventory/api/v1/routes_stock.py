# clothing_inventory/api/v1/routes_stock.py
from fastapi import APIRouter, Depends

from clothing_inventory.api.deps import get_context
from clothing_inventory.context import AppContext
from clothing_inventory.core.utils import round_money
from clothing_inventory.db.repositories.inventory import get_quantity
from clothing_inventory.domain.inventory.schemas import (
    BatchOut,
    MovementOut,
    ReceiveOut,
    ReceiveVariants,
    StockInBatch,
    StockInCreate,
    StockOutBatch,
    StockOutCreate,
)

router = APIRouter(prefix="/api/v1/stock", tags=["stock"])


async def _movement(ctx: AppContext, collection: str, movement_id: int) -> MovementOut:
    row = await ctx.store.get(collection, movement_id)
    return MovementOut(
        id=row["id"],
        clothing_id=row["clothing_id"],
        quantity=row["quantity"],
        total_amount=row["total_amount"],
        remaining_quantity=await get_quantity(ctx.store, row["clothing_id"]),
    )


async def _batch(ctx: AppContext, collection: str, ids) -> BatchOut:
    total = 0.0
    for movement_id in ids:
        row = await ctx.store.get(collection, movement_id)
        total += row["total_amount"]
    return BatchOut(ids=ids, total_amount=round_money(total))


@router.post("/stock-in", response_model=MovementOut, status_code=201)
async def stock_in_endpoint(payload: StockInCreate, ctx: AppContext = Depends(get_context)):
    stock_in_id = await ctx.inventory.record_stock_in(
        payload.clothing_id,
        payload.quantity,
        payload.purchase_price,
        date=payload.date,
        operator=payload.operator,
        notes=payload.notes,
    )
    return await _movement(ctx, "stockIn", stock_in_id)


@router.post("/stock-in/batch", response_model=BatchOut, status_code=201)
async def stock_in_batch_endpoint(payload: StockInBatch, ctx: AppContext = Depends(get_context)):
    ids = await ctx.inventory.submit_stock_in(
        payload.lines, date=payload.date, operator=payload.operator, notes=payload.notes
    )
    return await _batch(ctx, "stockIn", ids)


@router.post("/stock-in/receive", response_model=ReceiveOut, status_code=201)
async def receive_variants_endpoint(payload: ReceiveVariants, ctx: AppContext = Depends(get_context)):
    lines = await ctx.inventory.receive_variants(
        payload.template,
        payload.lines,
        date=payload.date,
        operator=payload.operator,
        notes=payload.notes,
    )
    return ReceiveOut(lines=lines)


@router.post("/stock-out", response_model=MovementOut, status_code=201)
async def stock_out_endpoint(payload: StockOutCreate, ctx: AppContext = Depends(get_context)):
    stock_out_id = await ctx.inventory.record_stock_out(
        payload.clothing_id,
        payload.quantity,
        payload.selling_price,
        date=payload.date,
        operator=payload.operator,
        notes=payload.notes,
        customer=payload.customer,
        available_quantity=payload.available_quantity,
    )
    return await _movement(ctx, "stockOut", stock_out_id)


@router.post("/stock-out/batch", response_model=BatchOut, status_code=201)
async def stock_out_batch_endpoint(payload: StockOutBatch, ctx: AppContext = Depends(get_context)):
    ids = await ctx.inventory.submit_stock_out(
        payload.lines,
        date=payload.date,
        operator=payload.operator,
        customer=payload.customer,
        notes=payload.notes,
    )
    return await _batch(ctx, "stockOut", ids)
