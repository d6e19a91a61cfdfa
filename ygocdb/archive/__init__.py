"""Archive parsing for the bulk card dataset."""

from ygocdb.archive.decompressor import METHOD_DEFLATE, METHOD_STORED, decompress
from ygocdb.archive.reader import ArchiveEntry, ByteView, extract, iter_entries

__all__ = [
    "METHOD_DEFLATE",
    "METHOD_STORED",
    "ArchiveEntry",
    "ByteView",
    "decompress",
    "extract",
    "iter_entries",
]
