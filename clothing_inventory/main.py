from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from clothing_inventory.api.v1.routes_backup import router as backup_router
from clothing_inventory.api.v1.routes_clothes import router as clothes_router
from clothing_inventory.api.v1.routes_records import router as records_router
from clothing_inventory.api.v1.routes_reports import router as reports_router
from clothing_inventory.api.v1.routes_settings import router as settings_router
from clothing_inventory.api.v1.routes_stock import router as stock_router
from clothing_inventory.api.v1.routes_sync import router as sync_router
from clothing_inventory.context import build_context
from clothing_inventory.core.config import Settings, settings as default_settings
from clothing_inventory.core.errors import InventoryAppError
from clothing_inventory.core.observability import (
    app_error_handler,
    http_exception_handler,
    request_logging_middleware,
    setup_observability,
    unhandled_exception_handler,
    validation_exception_handler,
)


def create_app(settings: Optional[Settings] = None, http: Optional[httpx.AsyncClient] = None) -> FastAPI:
    settings = settings or default_settings
    setup_observability(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        context = build_context(settings, http)
        app.state.context = context
        await context.start()
        try:
            yield
        finally:
            await context.close()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

    app.middleware("http")(request_logging_middleware)
    app.add_exception_handler(InventoryAppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(clothes_router)
    app.include_router(stock_router)
    app.include_router(reports_router)
    app.include_router(settings_router)
    app.include_router(records_router)
    app.include_router(backup_router)
    app.include_router(sync_router)

    @app.get("/health")
    async def health():
        store = app.state.context.store
        if store.init_error is not None:
            return {"status": "degraded", "store": store.init_error.message}
        return {"status": "ok", "store": "open", "schemaVersion": store.schema_version}

    return app


app = create_app()
