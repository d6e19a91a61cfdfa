"""
Authoritative local card collection.

The store owns the current ``DatasetSnapshot``: the cards, their version
token and the search index built from them. A snapshot is immutable and is
replaced by a single reference assignment, so readers always see either the
old collection or the new one, never a mix.

Durable layout (inside ``data_dir``):

    cards.json      the collection, in ygocdb's cid -> card layout
    cards_md5.txt   the version token, plain text
"""

import asyncio
import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ygocdb.models.card import Card
from ygocdb.models.dataset import DatasetManifest
from ygocdb.models.failure import PersistenceError
from ygocdb.parsers.cards_json import decode_cards, encode_cards
from ygocdb.services.search_index import SearchIndex

logger = logging.getLogger(__name__)

CARDS_FILE_NAME = "cards.json"
TOKEN_FILE_NAME = "cards_md5.txt"


@dataclass(frozen=True)
class DatasetSnapshot:
    """One immutable, fully indexed version of the collection."""

    cards: tuple[Card, ...] = ()
    manifest: DatasetManifest | None = None
    index: SearchIndex = field(default_factory=SearchIndex)
    by_id: dict[int, Card] = field(default_factory=dict)

    @classmethod
    def build(cls, cards: Iterable[Card], token: str) -> "DatasetSnapshot":
        ordered = tuple(cards)
        return cls(
            cards=ordered,
            manifest=DatasetManifest(token),
            index=SearchIndex(ordered),
            by_id={card.id: card for card in ordered},
        )

    @property
    def is_loaded(self) -> bool:
        return self.manifest is not None


class DatasetStore:
    """Loads, persists and serves the card collection."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir
        self._snapshot = DatasetSnapshot()
        self._lock = asyncio.Lock()

    @property
    def cards_path(self) -> Path:
        return self.data_dir / CARDS_FILE_NAME

    @property
    def token_path(self) -> Path:
        return self.data_dir / TOKEN_FILE_NAME

    @property
    def snapshot(self) -> DatasetSnapshot:
        return self._snapshot

    @property
    def cards(self) -> tuple[Card, ...]:
        return self._snapshot.cards

    @property
    def is_loaded(self) -> bool:
        return self._snapshot.is_loaded

    @property
    def has_local_data(self) -> bool:
        return self.cards_path.exists()

    def local_token(self) -> str | None:
        """
        Version token of the local dataset.

        Taken from the loaded snapshot when there is one, otherwise from the
        durable token file. None when neither exists.
        """
        manifest = self._snapshot.manifest
        if manifest is not None:
            return manifest.token
        try:
            token = self.token_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read %s: %s", self.token_path, e)
            return None
        return token or None

    async def load(self) -> bool:
        """
        Load the persisted collection.

        Returns:
            True when a snapshot was loaded, False when none is persisted
            (the store is left empty; this is not an error).

        Raises:
            PersistenceError: The files exist but cannot be read
            DecodeError: The persisted collection is malformed
        """
        async with self._lock:
            if not self.cards_path.exists():
                logger.info("No local card data at %s", self.cards_path)
                self._snapshot = DatasetSnapshot()
                return False

            snapshot = await asyncio.to_thread(self._read_snapshot)
            self._snapshot = snapshot
            logger.info("Loaded %d cards (version %s)", len(snapshot.cards), self.local_token())
            return True

    def _read_snapshot(self) -> DatasetSnapshot:
        try:
            payload = self.cards_path.read_bytes()
            token = self.token_path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise PersistenceError("Failed to read local card data", detail=str(e)) from e
        return DatasetSnapshot.build(decode_cards(payload), token)

    async def save(self, cards: Iterable[Card], token: str) -> None:
        """
        Persist a new collection and make it current.

        Both files are written to temporaries and then moved into place.
        Only after that succeeds is the in-memory snapshot replaced and the
        index rebuilt.

        Raises:
            PersistenceError: Writing failed. The previous durable files and
                the in-memory snapshot are unchanged.
        """
        snapshot = await asyncio.to_thread(_build_sorted, cards, token)

        async with self._lock:
            await asyncio.to_thread(self._write_files, snapshot.cards, token)
            self._snapshot = snapshot

        logger.info("Saved %d cards (version %s)", len(snapshot.cards), token)

    def _write_files(self, cards: tuple[Card, ...], token: str) -> None:
        cards_tmp = self.cards_path.with_name(CARDS_FILE_NAME + ".tmp")
        token_tmp = self.token_path.with_name(TOKEN_FILE_NAME + ".tmp")
        backup = self.cards_path.with_name(CARDS_FILE_NAME + ".bak")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            cards_tmp.write_bytes(encode_cards(cards))
            token_tmp.write_text(token, encoding="utf-8")
            had_previous = self.cards_path.exists()
            if had_previous:
                shutil.copyfile(self.cards_path, backup)

            os.replace(cards_tmp, self.cards_path)
            try:
                os.replace(token_tmp, self.token_path)
            except OSError:
                # The pair must stay consistent: put the old collection back
                if had_previous:
                    os.replace(backup, self.cards_path)
                else:
                    self.cards_path.unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError("Failed to write local card data", detail=str(e)) from e
        finally:
            cards_tmp.unlink(missing_ok=True)
            token_tmp.unlink(missing_ok=True)
            backup.unlink(missing_ok=True)

    async def clear(self) -> None:
        """Delete the persisted snapshot and empty the store."""
        async with self._lock:
            for path in (self.cards_path, self.token_path):
                try:
                    path.unlink(missing_ok=True)
                except OSError as e:
                    raise PersistenceError(f"Failed to delete {path.name}", detail=str(e)) from e
            self._snapshot = DatasetSnapshot()
        logger.info("Cleared local card data")

    def search(self, query: str) -> list[Card]:
        """Cards matching ``query``. An empty query returns no cards."""
        return self._snapshot.index.query(query)

    def get_card(self, card_id: int) -> Card | None:
        """Look up a card by id (password). None when absent."""
        return self._snapshot.by_id.get(card_id)

    def data_size(self) -> int:
        """Size of the persisted collection in bytes (0 when absent)."""
        try:
            return self.cards_path.stat().st_size
        except FileNotFoundError:
            return 0


def _build_sorted(cards: Iterable[Card], token: str) -> DatasetSnapshot:
    return DatasetSnapshot.build(sorted(cards, key=lambda card: card.cid), token)
