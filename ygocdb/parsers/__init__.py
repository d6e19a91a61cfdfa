from ygocdb.parsers.cards_json import CARDS_ENTRY_NAME, decode_cards, encode_cards, format_loc

__all__ = [
    "CARDS_ENTRY_NAME",
    "decode_cards",
    "encode_cards",
    "format_loc",
]
