"""
Single-block decompression for archive entries.

Only the two methods the dataset provider uses are supported:
0 (stored) and 8 (deflate).
"""

import logging
import zlib

from ygocdb.models.failure import (
    DecompressionFailedError,
    SizeMismatchError,
    UnsupportedMethodError,
)

logger = logging.getLogger(__name__)

METHOD_STORED = 0
METHOD_DEFLATE = 8

# zlib window bits: negative = raw deflate, +32 = auto-detect zlib/gzip header
_RAW_DEFLATE_WBITS = -zlib.MAX_WBITS
_WRAPPED_WBITS = zlib.MAX_WBITS | 32


def decompress(method: int, compressed: bytes, expected_size: int) -> bytes:
    """
    Decode one compressed block.

    Args:
        method: Compression method tag from the entry header
        compressed: The entry's payload bytes
        expected_size: Uncompressed size declared by the entry header

    Returns:
        Exactly ``expected_size`` decompressed bytes.

    Raises:
        SizeMismatchError: Stored entry length disagrees with the header
        DecompressionFailedError: Inflate failed or produced the wrong size
        UnsupportedMethodError: Any method other than 0 or 8
    """
    if method == METHOD_STORED:
        if len(compressed) != expected_size:
            raise SizeMismatchError(expected_size, len(compressed))
        return bytes(compressed)

    if method == METHOD_DEFLATE:
        return _inflate(compressed, expected_size)

    raise UnsupportedMethodError(method)


def _inflate(compressed: bytes, expected_size: int) -> bytes:
    logger.debug("Inflating %d bytes, expecting %d", len(compressed), expected_size)

    try:
        output = _inflate_with(compressed, expected_size, _RAW_DEFLATE_WBITS)
    except zlib.error:
        # Some producers wrap the stream in a zlib header
        try:
            output = _inflate_with(compressed, expected_size, _WRAPPED_WBITS)
        except zlib.error as e:
            raise DecompressionFailedError("Deflate stream is corrupt", detail=str(e)) from e

    if len(output) != expected_size:
        raise DecompressionFailedError(
            "Inflated size does not match the declared size",
            detail=f"expected {expected_size} bytes, got {len(output)}",
        )
    return output


def _inflate_with(compressed: bytes, expected_size: int, wbits: int) -> bytes:
    inflater = zlib.decompressobj(wbits)
    # One byte past the expected size is enough to detect oversized output
    output = inflater.decompress(compressed, expected_size + 1)
    if not inflater.eof and len(output) <= expected_size:
        raise zlib.error("incomplete or truncated stream")
    return output
