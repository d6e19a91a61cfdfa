"""
Two-tier card image cache.

Lookups go memory -> disk -> network. The memory tier is an LRU bounded by
entry count and total bytes; the disk tier is one file per cache key under
``image_cache_dir``.

Downloads are de-duplicated per cache key and bounded to
``max_concurrent_downloads`` active transfers. The cache-check, create and
attach steps all go through ``CacheState``, so two requests for the same key
can never start two downloads.
"""

import asyncio
import io
import logging
import os
import re
import shutil
import threading
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import httpx
from PIL import Image

from ygocdb.config import Settings, settings
from ygocdb.models.failure import DownloadFailedError
from ygocdb.services.http import describe_http_error
from ygocdb.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

_VARIANT_PATHS = (
    ("/ygopro/pics/", "ygopro"),
    ("/ygoimg/sc/", "sc"),
    ("/ygoimg/jp/", "jp"),
    ("/ygoimg/en/", "en"),
)
_ID_PATTERN = re.compile(r"/(\d+)\.(jpg|webp|png)")
_SIZE_SUFFIXES = ("half", "thumb2", "thumb", "art")


def cache_key(url: str) -> str:
    """
    Readable, stable file name for an image URL.

    Examples:
        .../ygopro/pics/89631139.jpg!thumb2 -> ygopro_89631139_thumb2.jpg
        .../ygoimg/sc/89392810.webp!/format/webp/fw/400/quality/85
            -> sc_89392810_hd_webp.webp
    """
    variant = next((name for path, name in _VARIANT_PATHS if path in url), "unknown")

    card_id, ext = "0", "jpg"
    match = _ID_PATTERN.search(url)
    if match:
        card_id, ext = match.group(1), match.group(2)

    size = "full"
    if "!/format/webp" in url or "/fw/" in url:
        size, ext = "hd_webp", "webp"
    else:
        for suffix in _SIZE_SUFFIXES:
            if url.endswith(f"!{suffix}"):
                size = suffix
                break

    return f"{variant}_{card_id}_{size}.{ext}"


def validate_image(payload: bytes) -> None:
    """
    Check that ``payload`` decodes as an image.

    Raises:
        ValueError: Empty or undecodable payload
    """
    if not payload:
        raise ValueError("empty payload")
    try:
        with Image.open(io.BytesIO(payload)) as image:
            image.verify()
    except (OSError, SyntaxError) as e:
        raise ValueError(f"not a decodable image: {e}") from e


class CacheTier(str, Enum):
    MEMORY = "memory"
    DISK = "disk"
    NETWORK = "network"


@dataclass(frozen=True, slots=True)
class CacheEntry:
    key: str
    payload: bytes
    tier: CacheTier

    @property
    def size(self) -> int:
        return len(self.payload)


class MemoryTier:
    """
    LRU of payloads bounded by entry count and total bytes.

    Not thread-safe on its own; ``CacheState`` guards it.
    """

    def __init__(self, max_entries: int, max_bytes: int) -> None:
        self.max_entries = max_entries
        self.max_bytes = max_bytes
        self._items: OrderedDict[str, bytes] = OrderedDict()
        self.total_bytes = 0

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def get(self, key: str) -> bytes | None:
        payload = self._items.get(key)
        if payload is not None:
            self._items.move_to_end(key)
        return payload

    def put(self, key: str, payload: bytes) -> None:
        """Insert ``payload`` as most recent, then evict down to the bounds."""
        previous = self._items.pop(key, None)
        if previous is not None:
            self.total_bytes -= len(previous)
        self._items[key] = payload
        self.total_bytes += len(payload)
        self._evict(keep=key)

    def _evict(self, keep: str) -> None:
        while len(self._items) > 1 and (
            len(self._items) > self.max_entries or self.total_bytes > self.max_bytes
        ):
            oldest = next(iter(self._items))
            if oldest == keep:
                break
            evicted = self._items.pop(oldest)
            self.total_bytes -= len(evicted)
            logger.debug("Evicted %s from memory cache", oldest)

    def clear(self) -> None:
        self._items.clear()
        self.total_bytes = 0


@dataclass(frozen=True, slots=True)
class CacheStats:
    active_downloads: int
    peak_downloads: int
    in_flight: int
    memory_entries: int
    memory_bytes: int


class CacheState:
    """
    Monitor over the shared mutable state of an ``AssetCache``.

    Holds the memory tier, the registry of in-flight downloads and the
    download counters. Every access takes the lock.
    """

    def __init__(self, max_entries: int, max_bytes: int, max_concurrent: int) -> None:
        self._lock = threading.Lock()
        self.memory = MemoryTier(max_entries, max_bytes)
        self.slots = asyncio.Semaphore(max_concurrent)
        self._in_flight: dict[str, asyncio.Task[bytes]] = {}
        self._active = 0
        self._peak = 0

    def memory_get(self, key: str) -> bytes | None:
        with self._lock:
            return self.memory.get(key)

    def memory_put(self, key: str, payload: bytes) -> None:
        with self._lock:
            self.memory.put(key, payload)

    def memory_clear(self) -> None:
        with self._lock:
            self.memory.clear()

    def resolve(
        self,
        key: str,
        start: Callable[[], "asyncio.Task[bytes]"],
    ) -> tuple["bytes | asyncio.Task[bytes]", bool]:
        """
        Atomically check memory, attach to an in-flight download, or start one.

        Returns:
            (payload, False) on a memory hit, otherwise (task, created) where
            ``created`` tells whether this call started the task.
        """
        with self._lock:
            payload = self.memory.get(key)
            if payload is not None:
                return payload, False
            task = self._in_flight.get(key)
            if task is not None:
                return task, False
            task = start()
            self._in_flight[key] = task
            return task, True

    def finish(self, key: str) -> None:
        with self._lock:
            self._in_flight.pop(key, None)

    def slot_acquired(self) -> None:
        with self._lock:
            self._active += 1
            self._peak = max(self._peak, self._active)

    def slot_released(self) -> None:
        with self._lock:
            self._active -= 1

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                active_downloads=self._active,
                peak_downloads=self._peak,
                in_flight=len(self._in_flight),
                memory_entries=len(self.memory),
                memory_bytes=self.memory.total_bytes,
            )


class AssetCache:
    """Memory + disk cache for card images with de-duplicated downloads."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache_dir: Path | None = None,
        config: Settings | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self._config = config or settings
        self.cache_dir = cache_dir or self._config.image_cache_dir
        self._retry = retry_policy or RetryPolicy(
            max_retries=self._config.download_max_retries,
            base_delay=self._config.download_backoff_base,
        )
        self._state = CacheState(
            max_entries=self._config.memory_cache_max_entries,
            max_bytes=self._config.memory_cache_max_bytes,
            max_concurrent=self._config.max_concurrent_downloads,
        )
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.cache_dir / key

    def stats(self) -> CacheStats:
        return self._state.stats()

    async def get_entry(self, url: str) -> CacheEntry | None:
        """Cached entry for ``url`` from memory or disk. Never touches the network."""
        key = cache_key(url)

        payload = self._state.memory_get(key)
        if payload is not None:
            return CacheEntry(key, payload, CacheTier.MEMORY)

        payload = await asyncio.to_thread(self._read_disk, key)
        if payload is not None:
            self._state.memory_put(key, payload)
            return CacheEntry(key, payload, CacheTier.DISK)

        return None

    async def get(self, url: str) -> bytes | None:
        entry = await self.get_entry(url)
        return entry.payload if entry else None

    async def fetch_and_cache(self, url: str) -> bytes:
        """
        Return the image for ``url``, downloading it if neither tier has it.

        Concurrent calls for the same key share one download. Cancelling one
        caller does not cancel the download for the others.

        Raises:
            DownloadFailedError: Non-2xx status, transport failure after
                retries, or a payload that is not an image
        """
        entry = await self.get_entry(url)
        if entry is not None:
            return entry.payload

        key = cache_key(url)
        resolved, created = self._state.resolve(
            key, lambda: asyncio.create_task(self._download_task(key, url))
        )
        if isinstance(resolved, bytes):
            return resolved

        task = resolved
        if not created:
            logger.debug("Attaching to in-flight download of %s", key)
        return await asyncio.shield(task)

    async def _download_task(self, key: str, url: str) -> bytes:
        try:
            async with self._state.slots:
                self._state.slot_acquired()
                try:
                    payload = await self._download(key, url)
                    await asyncio.to_thread(self._write_disk, key, payload)
                    self._state.memory_put(key, payload)
                finally:
                    self._state.slot_released()
            return payload
        finally:
            self._state.finish(key)

    async def _download(self, key: str, url: str) -> bytes:
        async def attempt() -> bytes:
            response = await self._client.get(url)
            response.raise_for_status()
            return response.content

        try:
            payload = await self._retry.run(attempt, label=key)
        except httpx.HTTPError as e:
            raise DownloadFailedError(
                f"Failed to download image {key}", detail=describe_http_error(e), key=key
            ) from e

        try:
            validate_image(payload)
        except ValueError as e:
            raise DownloadFailedError(
                f"Downloaded payload for {key} is not an image", detail=str(e), key=key
            ) from e

        logger.info("Downloaded %s (%d bytes)", key, len(payload))
        return payload

    def _read_disk(self, key: str) -> bytes | None:
        path = self.path_for(key)
        try:
            payload = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read cached image %s: %s", path, e)
            return None

        try:
            validate_image(payload)
        except ValueError as e:
            logger.warning("Discarding corrupt cached image %s: %s", path, e)
            path.unlink(missing_ok=True)
            return None
        return payload

    def _write_disk(self, key: str, payload: bytes) -> None:
        path = self.path_for(key)
        tmp = path.with_name(key + ".tmp")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(payload)
            os.replace(tmp, path)
        except OSError as e:
            # Disk is best-effort; the payload still reaches memory and callers
            logger.warning("Could not write cached image %s: %s", path, e)
            tmp.unlink(missing_ok=True)

    async def clear(self) -> None:
        """Empty the memory tier and recreate an empty disk directory."""
        self._state.memory_clear()
        await asyncio.to_thread(self._reset_disk)
        logger.info("Cleared image cache at %s", self.cache_dir)

    def _reset_disk(self) -> None:
        shutil.rmtree(self.cache_dir, ignore_errors=True)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    async def disk_usage(self) -> int:
        """Total bytes of cached files on disk."""
        return await asyncio.to_thread(self._disk_usage)

    def _disk_usage(self) -> int:
        if not self.cache_dir.exists():
            return 0
        return sum(path.stat().st_size for path in self.cache_dir.iterdir() if path.is_file())
