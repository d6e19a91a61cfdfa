"""Tests for the pre-release card service."""

from typing import Any

import httpx
import pytest
import respx

from ygocdb.config import Settings
from ygocdb.models.failure import DecodeError, DownloadFailedError
from ygocdb.services.pre_release import PreReleaseCardService

from conftest import PRE_RELEASE_URL


def pre_release_card(card_id: int, name: str, desc: str, **flags: Any) -> dict[str, Any]:
    return {
        "id": card_id,
        "name": name,
        "desc": desc,
        "overallString": f"{name} {desc}",
        "picUrl": f"https://pre.test/pics/{card_id}.jpg",
        "createTime": 1_736_755_200,
        "updateTime": 1_736_755_200,
        "created": flags.get("created", False),
        "updated": flags.get("updated", False),
    }


FEED = [
    pre_release_card(100200300, "Dragon of Tomorrow", "Cannot be destroyed.", created=True),
    pre_release_card(100200301, "明日之魔法", "抽1张卡。", updated=True),
    pre_release_card(100200302, "Old Reprint", "No changes."),
]


@pytest.fixture
async def service(test_settings: Settings):
    async with httpx.AsyncClient() as client:
        yield PreReleaseCardService(client, test_settings)


class TestFetchCards:
    @respx.mock
    async def test_downloads_list(self, service: PreReleaseCardService) -> None:
        respx.get(PRE_RELEASE_URL).mock(return_value=httpx.Response(200, json=FEED))

        cards = await service.fetch_cards()

        assert [card.id for card in cards] == [100200300, 100200301, 100200302]
        assert service.cached_cards == cards

    @respx.mock
    async def test_unchanged_feed_reuses_cache(self, service: PreReleaseCardService) -> None:
        """A HEAD with the same ETag skips the download."""
        get_route = respx.get(PRE_RELEASE_URL).mock(
            return_value=httpx.Response(200, json=FEED, headers={"ETag": '"v1"'})
        )
        head_route = respx.head(PRE_RELEASE_URL).mock(
            return_value=httpx.Response(200, headers={"ETag": '"v1"'})
        )

        first = await service.fetch_cards()
        second = await service.fetch_cards()

        assert second is first
        assert get_route.call_count == 1
        assert head_route.call_count == 1

    @respx.mock
    async def test_changed_feed_downloads_again(self, service: PreReleaseCardService) -> None:
        get_route = respx.get(PRE_RELEASE_URL).mock(
            side_effect=[
                httpx.Response(200, json=FEED[:1], headers={"ETag": '"v1"'}),
                httpx.Response(200, json=FEED, headers={"ETag": '"v2"'}),
            ]
        )
        respx.head(PRE_RELEASE_URL).mock(return_value=httpx.Response(200, headers={"ETag": '"v2"'}))

        await service.fetch_cards()
        cards = await service.fetch_cards()

        assert len(cards) == 3
        assert get_route.call_count == 2

    @respx.mock
    async def test_force_refresh_skips_head(self, service: PreReleaseCardService) -> None:
        get_route = respx.get(PRE_RELEASE_URL).mock(return_value=httpx.Response(200, json=FEED))
        head_route = respx.head(PRE_RELEASE_URL)

        await service.fetch_cards()
        await service.fetch_cards(force_refresh=True)

        assert get_route.call_count == 2
        assert not head_route.called

    @respx.mock
    async def test_http_error(self, service: PreReleaseCardService) -> None:
        respx.get(PRE_RELEASE_URL).mock(return_value=httpx.Response(502))

        with pytest.raises(DownloadFailedError):
            await service.fetch_cards()

        assert service.cached_cards is None

    @respx.mock
    async def test_malformed_feed(self, service: PreReleaseCardService) -> None:
        broken = [dict(FEED[0], picUrl=None)]
        respx.get(PRE_RELEASE_URL).mock(return_value=httpx.Response(200, json=broken))

        with pytest.raises(DecodeError) as exc_info:
            await service.fetch_cards()

        assert exc_info.value.path == "0.picUrl"


class TestSearch:
    @pytest.fixture(autouse=True)
    def feed(self):
        with respx.mock(assert_all_called=False) as router:
            router.get(PRE_RELEASE_URL).mock(return_value=httpx.Response(200, json=FEED))
            router.head(PRE_RELEASE_URL).mock(return_value=httpx.Response(404))
            yield router

    async def test_empty_query_returns_all(self, service: PreReleaseCardService) -> None:
        assert len(await service.search("")) == 3

    async def test_matches_name_case_insensitively(self, service: PreReleaseCardService) -> None:
        cards = await service.search("dragon")

        assert [card.id for card in cards] == [100200300]

    async def test_matches_description(self, service: PreReleaseCardService) -> None:
        cards = await service.search("抽1张")

        assert [card.id for card in cards] == [100200301]

    async def test_matches_id_substring(self, service: PreReleaseCardService) -> None:
        """Unlike the main index, pre-release ids match partially."""
        cards = await service.search("0020030")

        assert [card.id for card in cards] == [100200300, 100200301, 100200302]

    async def test_clear(self, service: PreReleaseCardService) -> None:
        await service.search("")

        service.clear()

        assert service.cached_cards is None
