"""Tests for the dataset sync job."""

import logging
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx

from ygocdb.config import Settings
from ygocdb.jobs.sync_cards import ProgressLogger, main, run_check, run_sync
from ygocdb.models.failure import TransportError
from ygocdb.services import Services

from conftest import API_BASE

VERSION_URL = f"{API_BASE}/cards.zip.md5"
ARCHIVE_URL = f"{API_BASE}/cards.zip"


@pytest.fixture
async def services(test_settings: Settings):
    async with Services(test_settings) as container:
        yield container


class TestProgressLogger:
    def test_logs_each_step_once(self, caplog: pytest.LogCaptureFixture) -> None:
        progress = ProgressLogger(step=25)

        with caplog.at_level(logging.INFO, logger="ygocdb.jobs.sync_cards"):
            for fraction in (0.0, 0.1, 0.26, 0.3, 0.5, 0.99, 1.0):
                progress(fraction)

        messages = [record.getMessage() for record in caplog.records]
        assert messages == [
            "Downloading cards.zip: 0%",
            "Downloading cards.zip: 26%",
            "Downloading cards.zip: 99%",
            "Downloading cards.zip: 100%",
        ]


class TestRunSync:
    @respx.mock
    async def test_downloads_into_empty_store(
        self, services: Services, cards_archive: bytes
    ) -> None:
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-1"))
        respx.get(ARCHIVE_URL).mock(return_value=httpx.Response(200, content=cards_archive))

        result = await run_sync(services=services)

        assert result.updated
        assert result.card_count == 3
        assert services.store.cards_path.exists()

    @respx.mock
    async def test_loads_existing_data_before_checking(
        self, services: Services, sample_cards
    ) -> None:
        """Existing data is loaded, so an unchanged token skips the download."""
        await services.store.save(sample_cards, "token-1")
        fresh = Services(services.config)
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-1"))
        archive_route = respx.get(ARCHIVE_URL)

        async with fresh:
            result = await run_sync(services=fresh)

            assert not result.updated
            assert result.card_count == 3
            assert fresh.store.is_loaded
        assert not archive_route.called

    @respx.mock
    async def test_unreadable_local_data_forces_download(
        self, services: Services, cards_archive: bytes
    ) -> None:
        services.store.data_dir.mkdir(parents=True, exist_ok=True)
        services.store.cards_path.write_text("not json", encoding="utf-8")
        services.store.token_path.write_text("token-1", encoding="utf-8")
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-1"))
        archive_route = respx.get(ARCHIVE_URL).mock(
            return_value=httpx.Response(200, content=cards_archive)
        )

        result = await run_sync(services=services)

        assert result.updated
        assert archive_route.call_count == 1
        assert len(services.store.cards) == 3

    @respx.mock
    async def test_failure_propagates(self, services: Services) -> None:
        respx.get(VERSION_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(TransportError):
            await run_sync(services=services)


class TestRunCheck:
    @respx.mock
    async def test_reports_new_version(self, services: Services, sample_cards) -> None:
        await services.store.save(sample_cards, "token-1")
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-2"))

        assert await run_check(services=services) == "token-2"

    @respx.mock
    async def test_up_to_date(self, services: Services, sample_cards) -> None:
        await services.store.save(sample_cards, "token-1")
        respx.get(VERSION_URL).mock(return_value=httpx.Response(200, content=b"token-1\n"))

        assert await run_check(services=services) is None


class TestMain:
    def test_sync_by_default(self) -> None:
        with patch("ygocdb.jobs.sync_cards.run_sync", new_callable=AsyncMock) as mock_sync:
            main([])

        mock_sync.assert_awaited_once_with(force=False)

    def test_force_flag(self) -> None:
        with patch("ygocdb.jobs.sync_cards.run_sync", new_callable=AsyncMock) as mock_sync:
            main(["--force"])

        mock_sync.assert_awaited_once_with(force=True)

    def test_check_only(self) -> None:
        with (
            patch("ygocdb.jobs.sync_cards.run_check", new_callable=AsyncMock) as mock_check,
            patch("ygocdb.jobs.sync_cards.run_sync", new_callable=AsyncMock) as mock_sync,
        ):
            main(["--check-only"])

        mock_check.assert_awaited_once()
        mock_sync.assert_not_awaited()

    def test_failure_exits_nonzero(self) -> None:
        with (
            patch(
                "ygocdb.jobs.sync_cards.run_sync",
                new_callable=AsyncMock,
                side_effect=TransportError("Failed to fetch dataset version"),
            ),
            pytest.raises(SystemExit) as exc_info,
        ):
            main([])

        assert exc_info.value.code == 1
