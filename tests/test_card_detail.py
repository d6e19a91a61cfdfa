"""Tests for the card detail service."""

import httpx
import pytest
import respx

from ygocdb.config import Settings
from ygocdb.models.failure import DecodeError, DownloadFailedError
from ygocdb.services.card_detail import card_detail_url, fetch_card_detail

from conftest import API_BASE

DETAIL_URL = f"{API_BASE}/card/89631139"

DETAIL_BODY = {
    "cid": 4007,
    "id": 89631139,
    "cn_name": "青眼白龙",
    "text": {"types": "[怪兽|通常] 龙/光", "desc": "传说之龙。"},
    "data": {"atk": 3000, "def": 2500, "type": 17},
    "faqs": [
        {
            "fid": "1",
            "title": "<b>问答</b>",
            "date": "2024-01-01",
            "question": "可以<br>吗？",
            "answer": "可以。",
        }
    ],
    "jppacks": [{"pid": "10", "name": "STRUCTURE DECK", "date": "1999-02-04", "setid": "SD"}],
    "enpacks": [],
    "avail": {"ocg": 1, "tcg": 1},
}


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


class TestCardDetail:
    def test_url_requests_all_sections(self, test_settings: Settings) -> None:
        assert card_detail_url(89631139, test_settings) == f"{DETAIL_URL}?show=all"

    @respx.mock
    async def test_parses_detail(
        self, http_client: httpx.AsyncClient, test_settings: Settings
    ) -> None:
        route = respx.get(DETAIL_URL, params={"show": "all"}).mock(
            return_value=httpx.Response(200, json=DETAIL_BODY)
        )

        detail = await fetch_card_detail(http_client, 89631139, test_settings)

        assert route.called
        assert detail.cn_name == "青眼白龙"
        assert detail.data is not None and detail.data.def_ == 2500
        assert detail.has_faqs
        assert detail.faqs is not None and detail.faqs[0].clean_question == "可以\n吗？"
        assert detail.has_jp_packs
        assert not detail.has_en_packs
        assert detail.avail is not None and detail.avail.tcg == 1

    @respx.mock
    async def test_not_found(self, http_client: httpx.AsyncClient, test_settings: Settings) -> None:
        respx.get(DETAIL_URL).mock(return_value=httpx.Response(404))

        with pytest.raises(DownloadFailedError) as exc_info:
            await fetch_card_detail(http_client, 89631139, test_settings)

        assert exc_info.value.detail == "HTTP 404"

    @respx.mock
    async def test_malformed_body(
        self, http_client: httpx.AsyncClient, test_settings: Settings
    ) -> None:
        respx.get(DETAIL_URL).mock(return_value=httpx.Response(200, json={"cid": "x", "id": 1}))

        with pytest.raises(DecodeError) as exc_info:
            await fetch_card_detail(http_client, 89631139, test_settings)

        assert exc_info.value.path == "cid"
