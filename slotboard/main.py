import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from slotboard.config import get_settings
from slotboard.controllers.health import router as health_router
from slotboard.controllers.rooms import router as rooms_router
from slotboard.errors import register_exception_handlers
from slotboard.lifespan import cleanup_resources, setup_resources
from slotboard.middleware import HTTPLogMiddleware

settings = get_settings()

app = FastAPI(title="Slotboard API", version="1.0.0")
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_origin_regex=settings.cors.origins_regex or None,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.debug.request:
    logging.getLogger("slotboard.http").setLevel(logging.DEBUG)
    app.add_middleware(HTTPLogMiddleware)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    try:
        yield
    finally:
        await cleanup_resources(resources)

app.router.lifespan_context = lifespan

app.include_router(health_router)
app.include_router(rooms_router)
