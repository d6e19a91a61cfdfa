"""
Bulk dataset download.

Pipeline: version token -> archive download (with progress) -> extract
``cards.json`` -> decode into Cards. Nothing is retried here; a failed fetch
surfaces immediately and the caller decides whether to try again.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass

import httpx

from ygocdb.archive.reader import extract
from ygocdb.config import Settings, settings
from ygocdb.models.card import Card
from ygocdb.models.dataset import FetchResult
from ygocdb.models.failure import TransportError
from ygocdb.parsers.cards_json import CARDS_ENTRY_NAME, decode_cards
from ygocdb.services.http import describe_http_error
from ygocdb.services.version_probe import VersionProbe

logger = logging.getLogger(__name__)

ARCHIVE_RESOURCE = "cards.zip"

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True, slots=True)
class DownloadProgress:
    """One progress event of a streaming download."""

    received: int
    total: int | None
    done: bool = False

    @property
    def fraction(self) -> float | None:
        """Received/total in 0..1; None when the total is unknown."""
        if self.done:
            return 1.0
        if not self.total:
            return None
        return min(self.received / self.total, 1.0)


def _declared_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        length = int(raw)
    except ValueError:
        return None
    return length if length > 0 else None


async def iter_download(
    client: httpx.AsyncClient,
    url: str,
    sink: bytearray,
    *,
    timeout: float,
    interval_bytes: int,
) -> AsyncIterator[DownloadProgress]:
    """
    Stream ``url`` into ``sink``, yielding progress at a bounded rate.

    An event is produced each time another ``interval_bytes`` have arrived,
    but only when the server declared a length. A final ``done`` event is
    always produced.

    Raises:
        httpx.HTTPError: Transport failure or non-2xx status
    """
    async with client.stream("GET", url, timeout=timeout) as response:
        response.raise_for_status()
        total = _declared_length(response)
        logger.info("Downloading %s (%s bytes declared)", url, total if total else "unknown")

        received = 0
        next_report = interval_bytes
        async for chunk in response.aiter_bytes():
            sink.extend(chunk)
            received += len(chunk)
            if total and received >= next_report:
                next_report = received + interval_bytes
                yield DownloadProgress(received=received, total=total)

        yield DownloadProgress(received=received, total=total, done=True)


class DatasetFetcher:
    """Downloads, extracts and decodes the bulk card dataset."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        probe: VersionProbe | None = None,
        config: Settings | None = None,
    ) -> None:
        self._client = client
        self._config = config or settings
        self._probe = probe or VersionProbe(client, self._config)

    @property
    def archive_url(self) -> str:
        return f"{self._config.api_base_url.rstrip('/')}/{ARCHIVE_RESOURCE}"

    async def download_archive(self, progress_callback: ProgressCallback | None = None) -> bytes:
        """
        Download the raw archive bytes.

        Raises:
            TransportError: Timeout, connection failure or non-2xx status
        """
        buffer = bytearray()
        try:
            async for event in iter_download(
                self._client,
                self.archive_url,
                buffer,
                timeout=self._config.bulk_timeout,
                interval_bytes=self._config.progress_interval_bytes,
            ):
                fraction = event.fraction
                if progress_callback is not None and fraction is not None:
                    progress_callback(fraction)
        except httpx.HTTPError as e:
            raise TransportError(
                "Failed to download card dataset", detail=describe_http_error(e)
            ) from e

        logger.info("Downloaded archive: %d bytes", len(buffer))
        return bytes(buffer)

    async def fetch(self, progress_callback: ProgressCallback | None = None) -> FetchResult:
        """
        Run the full fetch pipeline.

        Args:
            progress_callback: Receives download fractions in 0..1; the last
                call is always 1.0

        Returns:
            The decoded cards and the version token they belong to.

        Raises:
            TransportError: Version or archive request failed
            ArchiveError: Entry missing, truncated archive or unknown method
            DecompressionError: Inflate failed or size mismatch
            DecodeError: Payload does not match the card model
        """
        token = await self._probe.fetch_remote_version()
        archive = await self.download_archive(progress_callback)

        cards = await asyncio.to_thread(_decode_archive, archive)
        logger.info("Decoded %d cards for version %s", len(cards), token)
        return FetchResult(cards=cards, token=token)


def _decode_archive(archive: bytes) -> tuple[Card, ...]:
    # CPU-bound; runs in a worker thread
    payload = extract(archive, CARDS_ENTRY_NAME)
    logger.info("Extracted %s: %d bytes", CARDS_ENTRY_NAME, len(payload))
    return decode_cards(payload)
