from dataclasses import dataclass

from ygocdb.models.card import Card


@dataclass(frozen=True, slots=True)
class DatasetManifest:
    """
    Version token of a dataset snapshot.

    The token is an opaque content hash (the md5 published next to the
    archive). Only equality is meaningful.
    """

    token: str


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Records from one successful bulk fetch, with the token that produced them."""

    cards: tuple[Card, ...]
    token: str

    def __len__(self) -> int:
        return len(self.cards)
