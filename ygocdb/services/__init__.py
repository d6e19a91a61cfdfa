"""
ygocdb services.

Dataset synchronization, local storage, search and the image cache.
"""

from ygocdb.services.asset_cache import AssetCache, CacheEntry, CacheStats, CacheTier, cache_key
from ygocdb.services.card_detail import fetch_card_detail
from ygocdb.services.container import Services, SyncResult
from ygocdb.services.dataset_fetcher import DatasetFetcher, DownloadProgress, iter_download
from ygocdb.services.dataset_store import DatasetSnapshot, DatasetStore
from ygocdb.services.http import create_client
from ygocdb.services.pre_release import PreReleaseCardService
from ygocdb.services.retry import RetryPolicy, is_retryable
from ygocdb.services.search_index import LiveSearch, SearchIndex, SearchIndexEntry
from ygocdb.services.version_probe import ChangeProbe, VersionProbe

__all__ = [
    "AssetCache",
    "CacheEntry",
    "CacheStats",
    "CacheTier",
    "ChangeProbe",
    "DatasetFetcher",
    "DatasetSnapshot",
    "DatasetStore",
    "DownloadProgress",
    "LiveSearch",
    "PreReleaseCardService",
    "RetryPolicy",
    "SearchIndex",
    "SearchIndexEntry",
    "Services",
    "SyncResult",
    "VersionProbe",
    "cache_key",
    "create_client",
    "fetch_card_detail",
    "is_retryable",
    "iter_download",
]
