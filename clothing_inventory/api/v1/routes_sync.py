# clothing_inventory/api/v1/routes_sync.py
from fastapi import APIRouter, Depends

from clothing_inventory.api.deps import get_context
from clothing_inventory.context import AppContext
from clothing_inventory.domain.sync.schemas import NetworkUpdate, SignIn, SyncStatus, UserOut

router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


@router.get("/status", response_model=SyncStatus)
async def sync_status_endpoint(ctx: AppContext = Depends(get_context)):
    return await ctx.reconciler.status()


@router.post("/sign-in", response_model=UserOut)
async def sign_in_endpoint(payload: SignIn, ctx: AppContext = Depends(get_context)):
    user = await ctx.auth.sign_in(payload.email, payload.password)
    return UserOut(uid=user.uid, email=user.email)


@router.post("/sign-out", response_model=SyncStatus)
async def sign_out_endpoint(ctx: AppContext = Depends(get_context)):
    await ctx.auth.sign_out()
    return await ctx.reconciler.status()


@router.post("/network", response_model=SyncStatus)
async def network_endpoint(payload: NetworkUpdate, ctx: AppContext = Depends(get_context)):
    # the host reports connectivity changes (browser online/offline events)
    await ctx.network.set_online(payload.online)
    return await ctx.reconciler.status()


@router.post("/run", response_model=SyncStatus)
async def run_sync_endpoint(ctx: AppContext = Depends(get_context)):
    await ctx.reconciler.reconcile(raise_errors=True)
    return await ctx.reconciler.status()
