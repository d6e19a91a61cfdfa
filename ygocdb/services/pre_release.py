"""
Pre-release card feed.

The feed is a single JSON list. It is kept in memory and re-downloaded only
when a HEAD request reports new validators (see ``ChangeProbe``).
"""

import logging

import httpx
from pydantic import TypeAdapter, ValidationError

from ygocdb.config import Settings, settings
from ygocdb.models.failure import DecodeError, DownloadFailedError
from ygocdb.models.pre_release import PreReleaseCard
from ygocdb.parsers.cards_json import format_loc
from ygocdb.services.http import describe_http_error
from ygocdb.services.version_probe import ChangeProbe

logger = logging.getLogger(__name__)

_CARD_LIST = TypeAdapter(list[PreReleaseCard])


class PreReleaseCardService:
    """Fetches, caches and searches pre-release cards."""

    def __init__(self, client: httpx.AsyncClient, config: Settings | None = None) -> None:
        self._client = client
        self._config = config or settings
        self._probe = ChangeProbe(client, self._config.pre_release_url)
        self._cards: list[PreReleaseCard] | None = None

    @property
    def url(self) -> str:
        return self._probe.url

    @property
    def cached_cards(self) -> list[PreReleaseCard] | None:
        return self._cards

    async def fetch_cards(self, force_refresh: bool = False) -> list[PreReleaseCard]:
        """
        Return the pre-release list.

        With a cached list and no ``force_refresh``, a HEAD check decides
        whether the cached list can be reused.

        Raises:
            TransportError: The HEAD check could not be made
            DownloadFailedError: The list download failed
            DecodeError: The list does not match the card model
        """
        if not force_refresh and self._cards is not None:
            if not await self._probe.has_changed():
                logger.info("Pre-release list unchanged, using %d cached cards", len(self._cards))
                return self._cards
            logger.info("Pre-release list changed, downloading again")

        logger.info("Fetching pre-release list from %s", self.url)
        try:
            response = await self._client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DownloadFailedError(
                "Failed to fetch pre-release cards", detail=describe_http_error(e)
            ) from e

        try:
            cards = _CARD_LIST.validate_json(response.content)
        except ValidationError as e:
            error = e.errors()[0]
            raise DecodeError(
                "Pre-release list is malformed", path=format_loc(error["loc"]), detail=error["msg"]
            ) from e

        self._probe.observe(response)
        self._cards = cards
        logger.info("Fetched %d pre-release cards", len(cards))
        return cards

    async def search(self, query: str, force_refresh: bool = False) -> list[PreReleaseCard]:
        """
        Filter the list by name, effect text or id.

        An empty query returns every card. Name and text match
        case-insensitively; the id matches as a substring of its digits.
        """
        cards = await self.fetch_cards(force_refresh)
        if not query:
            return cards

        folded = query.casefold()
        return [
            card
            for card in cards
            if folded in card.name.casefold()
            or folded in card.desc.casefold()
            or query in str(card.id)
        ]

    def clear(self) -> None:
        self._cards = None
        self._probe.reset()
        logger.info("Cleared pre-release cache")
