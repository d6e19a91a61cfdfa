"""
Remote version checks.

``VersionProbe`` reads the md5 token published beside the bulk archive and
compares it with the locally stored token. ``ChangeProbe`` is the lighter
header-based variant used for adjacent datasets: it issues a HEAD request and
compares ``ETag``/``Last-Modified`` with the values seen on the last full
download.
"""

import logging
from dataclasses import dataclass

import httpx

from ygocdb.config import Settings, settings
from ygocdb.models.failure import InvalidResponseError, TransportError
from ygocdb.services.http import describe_http_error

logger = logging.getLogger(__name__)

VERSION_RESOURCE = "cards.zip.md5"


class VersionProbe:
    """Fetches and compares the dataset version token."""

    def __init__(self, client: httpx.AsyncClient, config: Settings | None = None) -> None:
        self._client = client
        self._config = config or settings

    @property
    def version_url(self) -> str:
        return f"{self._config.api_base_url.rstrip('/')}/{VERSION_RESOURCE}"

    async def fetch_remote_version(self) -> str:
        """
        Fetch the remote version token.

        Returns:
            The token, stripped of surrounding whitespace.

        Raises:
            TransportError: Timeout, connection failure or non-2xx status
            InvalidResponseError: Body is empty or not UTF-8
        """
        url = self.version_url
        logger.info("Fetching dataset version from %s", url)

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(
                "Failed to fetch dataset version", detail=describe_http_error(e)
            ) from e

        try:
            token = response.content.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise InvalidResponseError("Dataset version is not valid UTF-8") from e

        if not token:
            raise InvalidResponseError("Dataset version response is empty")

        logger.info("Remote dataset version: %s", token)
        return token

    async def has_remote_changed(self, local_token: str | None) -> bool:
        """
        Whether the remote dataset differs from the local one.

        No local token means there is nothing to compare against, so the
        answer is True without a network call.
        """
        if not local_token:
            return True
        remote = await self.fetch_remote_version()
        return remote != local_token

    async def check_for_new_version(self, local_token: str | None) -> str | None:
        """Return the remote token if it differs from ``local_token``, else None."""
        remote = await self.fetch_remote_version()
        if remote != local_token:
            logger.info("New dataset version available: %s", remote)
            return remote
        logger.info("Dataset is up to date")
        return None


@dataclass
class ObservedHeaders:
    etag: str | None = None
    last_modified: str | None = None


class ChangeProbe:
    """
    Header-based change detection for one resource.

    Call ``observe`` with every full GET response so the probe knows the
    current validators, then ``has_changed`` before re-downloading.
    """

    def __init__(self, client: httpx.AsyncClient, url: str) -> None:
        self._client = client
        self.url = url
        self.observed = ObservedHeaders()

    def observe(self, response: httpx.Response) -> None:
        """Record the validators of a successful full response."""
        etag = response.headers.get("ETag")
        last_modified = response.headers.get("Last-Modified")
        if etag:
            self.observed.etag = etag
        if last_modified:
            self.observed.last_modified = last_modified

    def reset(self) -> None:
        self.observed = ObservedHeaders()

    async def has_changed(self) -> bool:
        """
        HEAD the resource and compare validators.

        Returns True when the HEAD fails with a non-200 status, or when
        neither header can be compared. Stale data is never served silently.

        Raises:
            TransportError: The HEAD request itself could not be made
        """
        try:
            response = await self._client.head(self.url)
        except httpx.HTTPError as e:
            raise TransportError(
                "Failed to check resource for changes", detail=describe_http_error(e)
            ) from e

        if response.status_code != 200:
            logger.info("HEAD %s returned %d, assuming changed", self.url, response.status_code)
            return True

        etag = response.headers.get("ETag")
        if etag and self.observed.etag:
            changed = etag != self.observed.etag
            logger.info("ETag %s vs %s -> changed=%s", self.observed.etag, etag, changed)
            return changed

        last_modified = response.headers.get("Last-Modified")
        if last_modified and self.observed.last_modified:
            changed = last_modified != self.observed.last_modified
            logger.info(
                "Last-Modified %s vs %s -> changed=%s",
                self.observed.last_modified,
                last_modified,
                changed,
            )
            return changed

        logger.info("No comparable ETag/Last-Modified for %s, assuming changed", self.url)
        return True
