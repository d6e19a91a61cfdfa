"""
Dataset API endpoints.

Status, version check, sync and removal of the local card dataset.
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ygocdb.api.deps import ServicesDep

router = APIRouter(prefix="/dataset", tags=["dataset"])


class DatasetStatusResponse(BaseModel):
    """Response model for the local dataset state."""

    loaded: bool
    has_local_data: bool
    token: str | None = None
    card_count: int = 0
    size_bytes: int = Field(default=0, description="Size of the persisted cards.json")


class VersionCheckResponse(BaseModel):
    """Response model for a remote version check."""

    local_token: str | None = None
    remote_token: str | None = Field(
        default=None,
        description="New remote token; null when the local dataset is current",
    )
    update_available: bool


class SyncResponse(BaseModel):
    """Response model for a dataset sync."""

    updated: bool
    token: str | None = None
    card_count: int


class ClearResponse(BaseModel):
    cleared: bool


@router.get("", response_model=DatasetStatusResponse)
async def dataset_status(services: ServicesDep) -> DatasetStatusResponse:
    """Report what is stored locally. Never touches the network."""
    store = services.store
    return DatasetStatusResponse(
        loaded=store.is_loaded,
        has_local_data=store.has_local_data,
        token=store.local_token(),
        card_count=len(store.cards),
        size_bytes=store.data_size(),
    )


@router.get("/check", response_model=VersionCheckResponse)
async def check_version(services: ServicesDep) -> VersionCheckResponse:
    """Compare the local token with the remote one."""
    remote = await services.check_for_update()
    return VersionCheckResponse(
        local_token=services.store.local_token(),
        remote_token=remote,
        update_available=remote is not None,
    )


@router.post("/sync", response_model=SyncResponse)
async def sync_dataset(
    services: ServicesDep,
    force: bool = Query(default=False, description="Download even if the token is unchanged"),
) -> SyncResponse:
    """
    Download and store the dataset if the remote version differs.

    Failures are returned as an ApiResponse failure envelope; the stored
    dataset is left as it was.
    """
    result = await services.sync(force=force)
    return SyncResponse(updated=result.updated, token=result.token, card_count=result.card_count)


@router.delete("", response_model=ClearResponse)
async def clear_dataset(services: ServicesDep) -> ClearResponse:
    """Delete the persisted dataset and empty the in-memory collection."""
    await services.store.clear()
    return ClearResponse(cleared=True)
