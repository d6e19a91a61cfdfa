"""
Minimal archive reader.

The dataset provider ships exactly one payload file per archive, so this is
not a general zip implementation: no central directory, no multi-disk, no
encryption. It walks the sequential local entry headers from offset 0 until
it finds the named entry.

Local entry header layout (little-endian):

    offset  size  field
    0       4     signature  PK\\x03\\x04
    8       2     compression method
    18      4     compressed size
    22      4     uncompressed size
    26      2     file name length
    28      2     extra field length
    30      n     file name
    30+n    m     extra field
    30+n+m        payload (compressed size bytes)
"""

import logging
import struct
from collections.abc import Iterator
from dataclasses import dataclass

from ygocdb.archive.decompressor import decompress
from ygocdb.models.failure import EntryNotFoundError, TruncatedArchiveError

logger = logging.getLogger(__name__)

LOCAL_HEADER_SIGNATURE = b"PK\x03\x04"
LOCAL_HEADER_SIZE = 30

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """One entry's header, as found during the walk."""

    name: str
    method: int
    compressed_size: int
    uncompressed_size: int
    data_offset: int


class ByteView:
    """Bounds-checked reads over an immutable byte buffer."""

    __slots__ = ("_buf",)

    def __init__(self, data: bytes) -> None:
        self._buf = memoryview(bytes(data))

    def __len__(self) -> int:
        return len(self._buf)

    def slice(self, offset: int, length: int) -> bytes:
        if offset < 0 or length < 0 or offset + length > len(self._buf):
            raise TruncatedArchiveError(offset, length, len(self._buf))
        return self._buf[offset : offset + length].tobytes()

    def u16(self, offset: int) -> int:
        return _U16.unpack(self.slice(offset, 2))[0]

    def u32(self, offset: int) -> int:
        return _U32.unpack(self.slice(offset, 4))[0]

    def has(self, offset: int, length: int) -> bool:
        return offset >= 0 and offset + length <= len(self._buf)


def iter_entries(archive: bytes | ByteView) -> Iterator[ArchiveEntry]:
    """
    Walk local entry headers from the start of the archive.

    Stops at the first position that does not carry a local header
    signature (normally the central directory).

    Raises:
        TruncatedArchiveError: A header, name or payload runs past the end
    """
    view = archive if isinstance(archive, ByteView) else ByteView(archive)
    offset = 0

    while view.has(offset, len(LOCAL_HEADER_SIGNATURE)):
        if view.slice(offset, 4) != LOCAL_HEADER_SIGNATURE:
            logger.debug("Entry headers end at offset %d", offset)
            break

        method = view.u16(offset + 8)
        compressed_size = view.u32(offset + 18)
        uncompressed_size = view.u32(offset + 22)
        name_length = view.u16(offset + 26)
        extra_length = view.u16(offset + 28)

        raw_name = view.slice(offset + LOCAL_HEADER_SIZE, name_length)
        name = raw_name.decode("utf-8", errors="replace")
        data_offset = offset + LOCAL_HEADER_SIZE + name_length + extra_length
        if not view.has(data_offset, compressed_size):
            raise TruncatedArchiveError(data_offset, compressed_size, len(view))

        entry = ArchiveEntry(
            name=name,
            method=method,
            compressed_size=compressed_size,
            uncompressed_size=uncompressed_size,
            data_offset=data_offset,
        )
        logger.debug(
            "Entry %r: method=%d compressed=%d uncompressed=%d",
            name,
            method,
            compressed_size,
            uncompressed_size,
        )
        yield entry

        offset = data_offset + compressed_size


def extract(archive: bytes, target_name: str) -> bytes:
    """
    Extract and decompress the entry named ``target_name``.

    Args:
        archive: The full archive bytes
        target_name: Exact entry name to look for (e.g. "cards.json")

    Returns:
        The entry's decompressed bytes.

    Raises:
        EntryNotFoundError: No entry with that name before the headers end
        TruncatedArchiveError: A computed slice exceeds the archive bounds
        UnsupportedMethodError, SizeMismatchError, DecompressionFailedError:
            From the decompressor
    """
    view = ByteView(archive)
    logger.info("Scanning archive (%d bytes) for %s", len(view), target_name)

    for entry in iter_entries(view):
        if entry.name != target_name:
            continue
        payload = view.slice(entry.data_offset, entry.compressed_size)
        return decompress(entry.method, payload, entry.uncompressed_size)

    raise EntryNotFoundError(target_name)
