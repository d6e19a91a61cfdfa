"""Tests for the service container and the dataset sync flow."""

import httpx
import pytest
import respx

from ygocdb.config import Settings
from ygocdb.models.failure import TransportError, TruncatedArchiveError
from ygocdb.services import Services

from conftest import API_BASE

VERSION_URL = f"{API_BASE}/cards.zip.md5"
ARCHIVE_URL = f"{API_BASE}/cards.zip"


@pytest.fixture
async def services(test_settings: Settings):
    async with Services(test_settings) as container:
        yield container


class TestServicesContainer:
    async def test_shares_one_client(self, services: Services) -> None:
        assert services.fetcher._client is services.client
        assert services.assets._client is services.client

    async def test_client_sends_user_agent(self, services: Services) -> None:
        assert services.client.headers["User-Agent"].startswith("ygocdb/")

    async def test_uses_configured_directories(
        self, services: Services, test_settings: Settings
    ) -> None:
        assert services.store.data_dir == test_settings.data_dir
        assert services.assets.cache_dir == test_settings.image_cache_dir


class TestSync:
    @respx.mock
    async def test_first_sync_downloads(self, services: Services, cards_archive: bytes) -> None:
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-1"))
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(200, content=cards_archive))

        result = await services.sync()

        assert result.updated
        assert result.token == "token-1"
        assert result.card_count == 3
        assert services.store.local_token() == "token-1"
        assert len(services.store.search("青眼")) == 1

    @respx.mock
    async def test_same_version_skips_download(
        self, services: Services, cards_archive: bytes
    ) -> None:
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-1"))
        archive_route = respx.get(ARCHIVE_URL).mock(
            return_value=httpx.Response(200, content=cards_archive)
        )
        await services.sync()

        result = await services.sync()

        assert not result.updated
        assert result.card_count == 3
        assert archive_route.call_count == 1

    @respx.mock
    async def test_force_downloads_again(self, services: Services, cards_archive: bytes) -> None:
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-1"))
        archive_route = respx.get(ARCHIVE_URL).mock(
            return_value=httpx.Response(200, content=cards_archive)
        )
        await services.sync()

        result = await services.sync(force=True)

        assert result.updated
        assert archive_route.call_count == 2

    @respx.mock
    async def test_failed_fetch_keeps_stored_dataset(
        self, services: Services, cards_archive: bytes
    ) -> None:
        """A failed refresh leaves the previous snapshot in place."""
        respx.get(VERSION_URL).mock(
            side_effect=[
                httpx.Response(200, content=b"token-1"),
                httpx.Response(200, content=b"token-2"),
                httpx.Response(200, content=b"token-2"),
            ]
        )
        respx.get(ARCHIVE_URL).mock(
            side_effect=[
                httpx.Response(200, content=cards_archive),
                httpx.Response(200, content=b"PK\x03\x04 broken"),
            ]
        )
        await services.sync()
        snapshot = services.store.snapshot

        with pytest.raises(TruncatedArchiveError):
            await services.sync()

        assert services.store.snapshot is snapshot
        assert services.store.local_token() == "token-1"

    @respx.mock
    async def test_check_for_update(self, services: Services, sample_cards) -> None:
        await services.store.save(sample_cards, "token-1")
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-2"))

        assert await services.check_for_update() == "token-2"

    @respx.mock
    async def test_unreachable_server(self, services: Services) -> None:
        respx.get(VERSION_URL).mock(side_effect=httpx.ConnectError("offline"))

        with pytest.raises(TransportError):
            await services.sync()

        assert not services.store.has_local_data
