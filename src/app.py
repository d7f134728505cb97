"""Storefront FastAPI application.

Serves the catalogue and ordering APIs under ``/api``. Storage is connected in
the lifespan hook; when it cannot be reached the listener still starts so that
``/api/health`` stays available. Business routes answer 503 until the store
answers, at which point the schema is ensured and requests are served again.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 3000
    python src/app.py
"""

import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from catalogue.api import product_router
from catalogue.product.catalog import ProductCatalog
from catalogue.product.images import ImageStore
from ordering.api import order_router
from ordering.order.engine import OrderEngine
from shared.config import Settings, get_settings
from shared.http import register_error_handlers
from shared.logging import bind_request, clear_request, configure_logging
from storage import open_store, ping

logger = structlog.get_logger(__name__)

SERVICE_NAME = "storefront-api"


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_dir)

        storage = await run_in_threadpool(open_store, settings)
        engine = storage.engine

        app.state.storage = storage
        app.state.catalog = ProductCatalog(engine, ImageStore.from_settings(settings))
        app.state.orders = OrderEngine(engine)
        logger.info("Storefront started", port=settings.port, storage_connected=storage.ready)

        yield

        if engine is not None:
            engine.dispose()
        logger.info("Storefront stopped")

    app = FastAPI(
        title="Storefront API",
        description="Product catalogue and order processing",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Tag every log line emitted while serving a request with its id.

        While storage is still missing, each request first gives it a chance to
        recover.
        """
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        bind_request(request_id, request.method, request.url.path)
        started = time.perf_counter()
        storage = getattr(request.app.state, "storage", None)
        if storage is not None and not storage.ready:
            await run_in_threadpool(storage.ensure)
        try:
            response = await call_next(request)
        finally:
            clear_request()
        response.headers["X-Request-ID"] = request_id
        logger.debug(
            "Request handled",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response

    register_error_handlers(app)

    api = APIRouter(prefix="/api")

    @api.get("/health")
    def health(request: Request):
        storage = getattr(request.app.state, "storage", None)
        connected = storage is not None and storage.ensure() and ping(storage.engine)
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "database": "connected" if connected else "disconnected",
            "storage_connected": connected,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    api.include_router(product_router)
    api.include_router(order_router)
    app.include_router(api)

    app.mount("/api/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")

    return app


app = create_app()


def main():
    settings = get_settings()
    uvicorn.run("app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
