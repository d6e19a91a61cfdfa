"""
In-memory card search.

The index case-folds every searchable field once, at build time, so repeated
queries only fold the query itself. A card matches when the query is a
substring of any localized name or of the effect text, or when it equals the
card's id (password) written in decimal.

``LiveSearch`` runs queries off the event loop and applies only the result of
the most recently submitted query.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ygocdb.models.card import Card

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SearchIndexEntry:
    """Pre-folded searchable text of one card. References, never owns, the card."""

    card: Card
    fields: tuple[str, ...]
    id_text: str

    @classmethod
    def from_card(cls, card: Card) -> "SearchIndexEntry":
        texts = [name for name in card.names if name]
        if card.desc_display:
            texts.append(card.desc_display)
        return cls(
            card=card,
            fields=tuple(text.casefold() for text in texts),
            id_text=str(card.id),
        )

    def matches(self, folded_query: str, raw_query: str) -> bool:
        return any(folded_query in field for field in self.fields) or self.id_text == raw_query


class SearchIndex:
    """Substring index over a card collection."""

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._entries: tuple[SearchIndexEntry, ...] = ()
        self.build(cards)

    def __len__(self) -> int:
        return len(self._entries)

    def build(self, cards: Iterable[Card]) -> None:
        """Replace the whole index. O(n) in the number of cards."""
        self._entries = tuple(SearchIndexEntry.from_card(card) for card in cards)
        logger.debug("Search index built with %d entries", len(self._entries))

    def query(self, text: str) -> list[Card]:
        """
        Cards matching ``text``, in collection order.

        An empty (or whitespace-only) query matches nothing.
        """
        raw = text.strip()
        if not raw:
            return []
        folded = raw.casefold()
        return [entry.card for entry in self._entries if entry.matches(folded, raw)]


ResultsCallback = Callable[[str, list[Card]], None]


class LiveSearch:
    """
    Last-submitted-wins query runner.

    Each ``submit`` cancels the previous query's task and bumps a generation
    counter. A query whose generation is no longer current when its worker
    thread finishes drops its results instead of applying them.
    """

    def __init__(
        self,
        search: Callable[[str], list[Card]],
        on_results: ResultsCallback | None = None,
        *,
        debounce: float = 0.0,
    ) -> None:
        self._search = search
        self._on_results = on_results
        self._debounce = debounce
        self._generation = 0
        self._task: asyncio.Task[list[Card] | None] | None = None
        self.query = ""
        self.results: list[Card] = []

    @property
    def is_searching(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, query: str) -> "asyncio.Task[list[Card] | None]":
        """Start a search for ``query``, superseding any running one."""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = asyncio.create_task(self._run(query, self._generation))
        return self._task

    async def _run(self, query: str, generation: int) -> list[Card] | None:
        if self._debounce:
            await asyncio.sleep(self._debounce)

        results = await asyncio.to_thread(self._search, query)

        if generation != self._generation:
            logger.debug("Discarding stale results for %r", query)
            return None

        self.query = query
        self.results = results
        if self._on_results is not None:
            self._on_results(query, results)
        return results

    async def wait(self) -> list[Card]:
        """Wait for the current query and return the applied results."""
        task = self._task
        while task is not None:
            await asyncio.wait({task})
            if task is self._task:
                break
            task = self._task

        if task is not None and not task.cancelled():
            error = task.exception()
            if error is not None:
                raise error
        return self.results
