"""
Service wiring.

``Services`` constructs every service around one shared HTTP client and
owns that client's lifetime. The API lifespan and the CLI jobs both build
one explicitly; nothing here is a module-level singleton.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import httpx

from ygocdb.config import Settings, settings
from ygocdb.services.asset_cache import AssetCache
from ygocdb.services.dataset_fetcher import DatasetFetcher, ProgressCallback
from ygocdb.services.dataset_store import DatasetStore
from ygocdb.services.http import create_client
from ygocdb.services.pre_release import PreReleaseCardService
from ygocdb.services.version_probe import VersionProbe

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcome of one dataset sync."""

    updated: bool
    token: str | None
    card_count: int


class Services:
    """Container for the services sharing one HTTP client."""

    def __init__(
        self,
        config: Settings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        data_dir: Path | None = None,
        image_cache_dir: Path | None = None,
    ) -> None:
        self.config = config or settings
        self.client = client or create_client(self.config)
        self.probe = VersionProbe(self.client, self.config)
        self.fetcher = DatasetFetcher(self.client, self.probe, self.config)
        self.store = DatasetStore(data_dir or self.config.data_dir)
        self.assets = AssetCache(
            self.client, image_cache_dir or self.config.image_cache_dir, self.config
        )
        self.pre_release = PreReleaseCardService(self.client, self.config)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "Services":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def check_for_update(self) -> str | None:
        """New remote token, or None when the local dataset is current."""
        return await self.probe.check_for_new_version(self.store.local_token())

    async def sync(
        self,
        force: bool = False,
        progress_callback: ProgressCallback | None = None,
    ) -> SyncResult:
        """
        Bring the local dataset up to date.

        Without ``force`` the download is skipped when the remote token
        matches the local one. A failed fetch leaves the stored dataset
        untouched.

        Raises:
            YgocdbError: Any fetch, decode or persistence failure
        """
        if not force and not await self.probe.has_remote_changed(self.store.local_token()):
            logger.info("Dataset already up to date")
            return SyncResult(
                updated=False, token=self.store.local_token(), card_count=len(self.store.cards)
            )

        result = await self.fetcher.fetch(progress_callback)
        await self.store.save(result.cards, result.token)
        return SyncResult(updated=True, token=result.token, card_count=len(result))
