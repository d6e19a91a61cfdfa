import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ygocdb.api import (
    cards_router,
    dataset_router,
    health_router,
    images_router,
    pre_release_router,
)
from ygocdb.config import settings
from ygocdb.models.failure import KnownError, YgocdbError
from ygocdb.services.container import Services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the services and load the stored dataset; close the client on shutdown."""
    services = Services(settings)
    app.state.services = services
    try:
        await services.store.load()
    except YgocdbError as e:
        # Serve anyway; /ready stays 503 until a sync succeeds
        logger.error("Could not load local card data: %s", e)
    try:
        yield
    finally:
        await services.aclose()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("ygocdb"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Return explainable failures as an ApiResponse envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


app.include_router(cards_router)
app.include_router(dataset_router)
app.include_router(health_router)
app.include_router(images_router)
app.include_router(pre_release_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Local API; the UI runs on another origin
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
