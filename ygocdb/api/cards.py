"""
Card API endpoints.

Search and lookup over the local dataset, live card detail, and card images
served through the asset cache.
"""

from fastapi import APIRouter, Query, Response
from pydantic import BaseModel, Field

from ygocdb.api.deps import ServicesDep
from ygocdb.models.card import Card, NameSource
from ygocdb.models.card_detail import CardFullDetail
from ygocdb.models.failure import CardNotFoundError
from ygocdb.models.images import ImageLanguage, ImageSize, image_url
from ygocdb.services.card_detail import fetch_card_detail

router = APIRouter(prefix="/cards", tags=["cards"])

_MEDIA_TYPES = {
    "jpg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


class CardSummary(BaseModel):
    """One search hit, with the fields a result list shows."""

    cid: int
    id: int
    name: str
    types: str = ""
    atk: str | None = None
    def_: str | None = Field(default=None, serialization_alias="def")

    @classmethod
    def from_card(cls, card: Card, source: NameSource) -> "CardSummary":
        # ATK/DEF only make sense for monsters
        monster = card.data if card.data is not None and card.data.is_monster else None
        return cls(
            cid=card.cid,
            id=card.id,
            name=source.resolve(card),
            types=card.types_display,
            atk=monster.atk_text if monster else None,
            def_=monster.def_text if monster else None,
        )


class CardSearchResponse(BaseModel):
    """Response model for card search."""

    query: str
    total: int = Field(..., description="Number of matches before the limit is applied")
    cards: list[CardSummary] = Field(default_factory=list)


@router.get("/search", response_model=CardSearchResponse)
async def search_cards(
    services: ServicesDep,
    q: str = Query(default="", description="Name, effect text or exact card id"),
    limit: int = Query(default=50, ge=1, le=500),
    name_source: NameSource = Query(default=NameSource.YGOPRO),
) -> CardSearchResponse:
    """
    Search the local dataset.

    An empty query returns no cards. Results keep dataset order.
    """
    matches = services.store.search(q)
    return CardSearchResponse(
        query=q,
        total=len(matches),
        cards=[CardSummary.from_card(card, name_source) for card in matches[:limit]],
    )


@router.get("/{card_id}", response_model=Card)
async def get_card(card_id: int, services: ServicesDep) -> Card:
    """Look up a card in the local dataset by id (password)."""
    card = services.store.get_card(card_id)
    if card is None:
        raise CardNotFoundError(card_id)
    return card


@router.get("/{card_id}/detail", response_model=CardFullDetail)
async def get_card_detail(card_id: int, services: ServicesDep) -> CardFullDetail:
    """Fetch FAQs, pack listings and availability from ygocdb."""
    return await fetch_card_detail(services.client, card_id, services.config)


@router.get(
    "/{card_id}/image",
    response_class=Response,
    responses={200: {"content": {media: {} for media in _MEDIA_TYPES.values()}}},
)
async def get_card_image(
    card_id: int,
    services: ServicesDep,
    language: ImageLanguage = Query(default=ImageLanguage.YGOPRO),
    size: ImageSize = Query(default=ImageSize.FULL),
) -> Response:
    """
    Card image bytes, from the cache or the CDN.

    Concurrent requests for the same image share one download.
    """
    url = image_url(card_id, language, size, base_url=services.config.image_cdn_url)
    payload = await services.assets.fetch_and_cache(url)
    ext = "webp" if size is ImageSize.HALF else language.extension
    return Response(content=payload, media_type=_MEDIA_TYPES[ext])
