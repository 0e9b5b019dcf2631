from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.log import configure_logging

from .api.routes import router as api_router
from .api.live import router as live_router
from .api.schemas import AppHealthOK
import iot_hub.api.routes as routes_module

from .services.hub import HubService


logger = logging.getLogger(__name__)


hub: HubService | None = None


def get_hub() -> HubService:
    assert hub is not None
    return hub


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting %s (sample_seconds=%s)", settings.app_name, settings.sample_seconds)

    global hub
    hub = HubService()
    await hub.start()

    try:
        yield
    finally:
        await hub.stop()
        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Make the dependency function in routes resolve to the real one
app.dependency_overrides[routes_module.get_hub] = get_hub

app.include_router(api_router, prefix="/api")
app.include_router(live_router)


@app.get("/", tags=["meta"])
async def read_root() -> dict[str, str]:
    return {"message": settings.app_name}


@app.get("/health", tags=["meta"], response_model=AppHealthOK)
async def healthcheck() -> AppHealthOK:
    return AppHealthOK(status="ok", app=settings.app_name)


def run() -> None:
    import uvicorn

    uvicorn.run("iot_hub.main:app", host=settings.host, port=settings.port)
