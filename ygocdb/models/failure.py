"""
Failure classification for the acquisition and caching core.

Every error raised by this package is a ``KnownError`` tagged with a
``FailureKind``. Lower layers (decompressor, archive reader) raise the
specific subclasses; the fetcher and the asset cache wrap transport errors
from httpx but never swallow them.

"Not found" and "no update needed" are NOT errors. They are ordinary
return values (``None`` / ``False``).

The API layer turns any ``KnownError`` into an ``ApiResponse`` failure
envelope, so no raw 500 reaches the UI for an explainable failure.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Transport failures
    TRANSPORT = "transport"
    INVALID_RESPONSE = "invalid_response"
    DOWNLOAD_FAILED = "download_failed"

    # Archive failures
    ENTRY_NOT_FOUND = "entry_not_found"
    TRUNCATED_ARCHIVE = "truncated_archive"
    UNSUPPORTED_METHOD = "unsupported_method"

    # Decompression failures
    SIZE_MISMATCH = "size_mismatch"
    DECOMPRESSION_FAILED = "decompression_failed"

    # Payload decoding
    DECODE_ERROR = "decode_error"

    # Local storage
    PERSISTENCE = "persistence"

    # Resource lookup
    NOT_FOUND = "not_found"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope used by the local API for failures."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    kind: FailureKind = FailureKind.TRANSPORT
    status_code: int = 500

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        *,
        kind: FailureKind | None = None,
        status_code: int | None = None,
    ):
        if kind is not None:
            self.kind = kind
        if status_code is not None:
            self.status_code = status_code
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class YgocdbError(KnownError):
    """Root of every error raised by the ygocdb core."""


# =============================================================================
# TRANSPORT
# =============================================================================


class TransportError(YgocdbError):
    """Timeout, connection failure or non-2xx status on a remote call."""

    kind = FailureKind.TRANSPORT
    status_code = 502


class InvalidResponseError(TransportError):
    """The server answered, but the body is not what was expected."""

    kind = FailureKind.INVALID_RESPONSE


class DownloadFailedError(TransportError):
    """An asset or detail download failed. Shared by every attached waiter."""

    kind = FailureKind.DOWNLOAD_FAILED

    def __init__(self, message: str, detail: str | None = None, *, key: str | None = None):
        self.key = key
        super().__init__(message, detail)


# =============================================================================
# ARCHIVE
# =============================================================================


class ArchiveError(YgocdbError):
    """The downloaded archive cannot yield the requested entry."""

    status_code = 502


class EntryNotFoundError(ArchiveError):
    kind = FailureKind.ENTRY_NOT_FOUND

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Archive has no entry named {name!r}")


class TruncatedArchiveError(ArchiveError):
    kind = FailureKind.TRUNCATED_ARCHIVE

    def __init__(self, offset: int, length: int, size: int):
        self.offset = offset
        self.length = length
        self.size = size
        super().__init__(
            "Archive is truncated",
            detail=f"read of {length} bytes at offset {offset} exceeds archive size {size}",
        )


class UnsupportedMethodError(ArchiveError):
    kind = FailureKind.UNSUPPORTED_METHOD

    def __init__(self, method: int):
        self.method = method
        super().__init__(f"Unsupported compression method: {method}")


# =============================================================================
# DECOMPRESSION
# =============================================================================


class DecompressionError(YgocdbError):
    status_code = 502


class SizeMismatchError(DecompressionError):
    kind = FailureKind.SIZE_MISMATCH

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Entry size does not match archive bookkeeping",
            detail=f"expected {expected} bytes, got {actual}",
        )


class DecompressionFailedError(DecompressionError):
    kind = FailureKind.DECOMPRESSION_FAILED


# =============================================================================
# DECODING / PERSISTENCE
# =============================================================================


class DecodeError(YgocdbError):
    """A structured payload does not match the expected shape."""

    kind = FailureKind.DECODE_ERROR
    status_code = 502

    def __init__(self, message: str, path: str | None = None, detail: str | None = None):
        self.path = path
        if path:
            message = f"{message} (at {path})"
        super().__init__(message, detail)


class PersistenceError(YgocdbError):
    """Reading or writing the durable dataset snapshot failed."""

    kind = FailureKind.PERSISTENCE
    status_code = 500


class CardNotFoundError(YgocdbError):
    kind = FailureKind.NOT_FOUND
    status_code = 404

    def __init__(self, card_id: int):
        self.card_id = card_id
        super().__init__(
            f"Card {card_id} is not in the local dataset",
            suggestion="Sync the card dataset and try again.",
        )
