"""
Pre-release card API endpoints.
"""

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ygocdb.api.deps import ServicesDep
from ygocdb.models.pre_release import PreReleaseCard

router = APIRouter(prefix="/pre-release", tags=["pre-release"])


class PreReleaseListResponse(BaseModel):
    """Response model for the pre-release list."""

    query: str
    total: int
    new_count: int = Field(..., description="Cards added or updated in the latest revision")
    cards: list[PreReleaseCard] = Field(default_factory=list)


class ClearResponse(BaseModel):
    cleared: bool


@router.get("", response_model=PreReleaseListResponse)
async def list_pre_release_cards(
    services: ServicesDep,
    q: str = Query(default="", description="Name, effect text or id substring"),
    refresh: bool = Query(default=False, description="Skip the change check and download"),
) -> PreReleaseListResponse:
    """
    List pre-release cards.

    The list is re-downloaded only when the feed has changed, unless
    ``refresh`` is set.
    """
    cards = await services.pre_release.search(q, force_refresh=refresh)
    return PreReleaseListResponse(
        query=q,
        total=len(cards),
        new_count=sum(1 for card in cards if card.is_new),
        cards=cards,
    )


@router.delete("", response_model=ClearResponse)
async def clear_pre_release_cache(services: ServicesDep) -> ClearResponse:
    services.pre_release.clear()
    return ClearResponse(cleared=True)
