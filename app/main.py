"""Entry point for the FastAPI-powered catalog service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import Database
from .services.catalog_service import CatalogService
from .services.manifest import build_manifest_fetcher
from .services.store import CatalogStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            timeout=httpx.Timeout(settings.manifest_timeout_seconds, connect=5.0),
            follow_redirects=True,
        )
    )
    database = Database(settings.database_url)

    try:
        store = CatalogStore(database)
        await store.initialize()

        fetcher = build_manifest_fetcher(
            settings.manifest_url,
            http_client,
            timeout=settings.manifest_timeout_seconds,
        )
        catalog_service = CatalogService(store, fetcher)

        fastapi_app.state.catalog_service = catalog_service
        fastapi_app.state.database = database
        result = await catalog_service.start()
        logger.info(
            "Catalog ready (%s, %d items)",
            result.status.value,
            len(catalog_service.cache),
        )
        yield
    finally:
        await database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Searchable media catalog seeded from a JSON manifest",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_catalog_service(app: FastAPI) -> CatalogService:
    service = getattr(app.state, "catalog_service", None)
    if not isinstance(service, CatalogService):
        raise RuntimeError("Catalog service not initialised")
    return service


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/view")
    async def catalog_view(q: str | None = None) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            view = service.view(q)
        except RuntimeError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return view.to_payload()

    @fastapi_app.get("/api/items/{item_id}")
    async def catalog_item(item_id: str) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            item = service.get_item(item_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Item not found") from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return item.to_payload()

    @fastapi_app.get("/api/items/{item_id}/play")
    async def play_item(item_id: str) -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        try:
            selection = service.select_source(item_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail="Item not found") from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return selection.to_payload()

    @fastapi_app.get("/api/status")
    async def catalog_status() -> dict[str, Any]:
        service = get_catalog_service(fastapi_app)
        seed = service.last_seed
        return {
            "ready": service.started,
            "items": len(service.cache),
            "seed": seed.to_payload() if seed is not None else None,
        }


app = create_app()


if __name__ == "__main__":  # pragma: no cover - manual execution
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.environment == "development",
    )
