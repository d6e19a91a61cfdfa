"""
Image cache API endpoints.

Disk usage and clearing of the two-tier image cache.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from ygocdb.api.deps import ServicesDep

router = APIRouter(prefix="/images", tags=["images"])


class ImageCacheUsageResponse(BaseModel):
    """Response model for image cache statistics."""

    disk_bytes: int
    memory_entries: int
    memory_bytes: int
    active_downloads: int
    peak_downloads: int


class ClearResponse(BaseModel):
    cleared: bool


@router.get("/usage", response_model=ImageCacheUsageResponse)
async def image_cache_usage(services: ServicesDep) -> ImageCacheUsageResponse:
    stats = services.assets.stats()
    return ImageCacheUsageResponse(
        disk_bytes=await services.assets.disk_usage(),
        memory_entries=stats.memory_entries,
        memory_bytes=stats.memory_bytes,
        active_downloads=stats.active_downloads,
        peak_downloads=stats.peak_downloads,
    )


@router.delete("", response_model=ClearResponse)
async def clear_image_cache(services: ServicesDep) -> ClearResponse:
    """Empty the memory tier and delete every cached file."""
    await services.assets.clear()
    return ClearResponse(cleared=True)
