from typing import Optional

from fastapi import APIRouter, Depends

from clothing_inventory.api.deps import get_context
from clothing_inventory.context import AppContext
from clothing_inventory.domain.reports.schemas import DashboardStats, InventoryOverview, SalesReport

router = APIRouter(prefix="/api/v1", tags=["reports"])


@router.get("/inventory", response_model=InventoryOverview)
async def inventory_overview_endpoint(search: Optional[str] = None, ctx: AppContext = Depends(get_context)):
    return await ctx.reports.inventory_overview(search=search)


@router.get("/reports/sales", response_model=SalesReport)
async def sales_report_endpoint(start: str, end: str, ctx: AppContext = Depends(get_context)):
    return await ctx.reports.sales_report(start, end)


@router.get("/reports/dashboard", response_model=DashboardStats)
async def dashboard_endpoint(ctx: AppContext = Depends(get_context)):
    return await ctx.reports.dashboard()
