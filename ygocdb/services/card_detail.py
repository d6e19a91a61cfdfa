"""
Card detail service.

Fetches a single card with its FAQ, pack and availability data from
``/card/{id}?show=all``. Detail is never cached; the bulk dataset stays the
source of truth for the card record itself.
"""

import logging

import httpx
from pydantic import ValidationError

from ygocdb.config import Settings, settings
from ygocdb.models.card_detail import CardFullDetail
from ygocdb.models.failure import DecodeError, DownloadFailedError
from ygocdb.parsers.cards_json import format_loc
from ygocdb.services.http import describe_http_error

logger = logging.getLogger(__name__)


def card_detail_url(card_id: int, config: Settings | None = None) -> str:
    config = config or settings
    return f"{config.api_base_url.rstrip('/')}/card/{card_id}?show=all"


async def fetch_card_detail(
    client: httpx.AsyncClient,
    card_id: int,
    config: Settings | None = None,
) -> CardFullDetail:
    """
    Fetch full detail for one card.

    Args:
        client: Shared HTTP client
        card_id: Card id (password)
        config: Settings providing the API base URL

    Returns:
        The card detail.

    Raises:
        DownloadFailedError: Transport failure or non-2xx status
        DecodeError: The body does not match the detail model
    """
    url = card_detail_url(card_id, config)
    logger.info("Fetching card detail %d", card_id)

    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise DownloadFailedError(
            f"Failed to fetch detail for card {card_id}", detail=describe_http_error(e)
        ) from e

    try:
        return CardFullDetail.model_validate_json(response.content)
    except ValidationError as e:
        error = e.errors()[0]
        raise DecodeError(
            f"Card detail {card_id} is malformed",
            path=format_loc(error["loc"]),
            detail=error["msg"],
        ) from e
