"""
Codec for ygocdb's ``cards.json`` payload.

The payload is a JSON object mapping each card's ``cid`` (as a string) to the
card object. The same layout is used for the local durable snapshot, so a
downloaded payload and a persisted one go through the same decoder.
"""

import json
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ygocdb.models.card import Card
from ygocdb.models.failure import DecodeError

CARDS_ENTRY_NAME = "cards.json"

_CARD_DATABASE = TypeAdapter(dict[str, Card])


def format_loc(loc: Iterable[Any]) -> str | None:
    parts = [str(part) for part in loc]
    return ".".join(parts) if parts else None


def decode_cards(payload: bytes | str) -> tuple[Card, ...]:
    """
    Decode a ``cards.json`` payload.

    Args:
        payload: Raw JSON bytes (UTF-8) or text

    Returns:
        Cards sorted by ``cid``.

    Raises:
        DecodeError: Malformed JSON or a card that does not match the model.
            ``path`` names the offending field, e.g. ``"4007.data.atk"``.
    """
    try:
        database = _CARD_DATABASE.validate_json(payload)
    except ValidationError as e:
        first = e.errors()[0]
        raise DecodeError(
            f"Malformed card data: {first['msg']}",
            path=format_loc(first["loc"]),
            detail=f"{e.error_count()} error(s)",
        ) from e

    cards = sorted(database.values(), key=lambda card: card.cid)

    seen: set[int] = set()
    for card in cards:
        if card.cid in seen:
            raise DecodeError(f"Duplicate card cid {card.cid}", path=str(card.cid))
        seen.add(card.cid)

    return tuple(cards)


def encode_cards(cards: Iterable[Card]) -> bytes:
    """Encode cards back into the ``cards.json`` layout."""
    database: Mapping[str, Any] = {
        str(card.cid): card.model_dump(mode="json", by_alias=True, exclude_none=True)
        for card in cards
    }
    return json.dumps(database, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
