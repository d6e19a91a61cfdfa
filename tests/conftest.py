import io
import json
import zipfile
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from ygocdb.config import Settings
from ygocdb.models.card import Card

API_BASE = "https://ygocdb.test/api/v0"
CDN_BASE = "https://cdn.test"
PRE_RELEASE_URL = "https://pre.test/ygopro-super-pre/data/test-release-v2.json"


def card_json(cid: int, card_id: int, **fields: Any) -> dict[str, Any]:
    """A card object in the ygocdb JSON layout."""
    return {"cid": cid, "id": card_id, **fields}


def build_zip(entries: dict[str, bytes], method: int = zipfile.ZIP_DEFLATED) -> bytes:
    """Archive ``entries`` with the standard library zip writer."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=method) as archive:
        for name, payload in entries.items():
            archive.writestr(name, payload)
    return buffer.getvalue()


def image_bytes(image_format: str = "PNG", size: tuple[int, int] = (4, 6)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format=image_format)
    return buffer.getvalue()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings pointing at test hosts and temporary directories."""
    return Settings(
        api_base_url=API_BASE,
        image_cdn_url=CDN_BASE,
        pre_release_url=PRE_RELEASE_URL,
        data_dir=tmp_path / "data",
        image_cache_dir=tmp_path / "images",
        download_backoff_base=0.0,
        progress_interval_bytes=1_000,
    )


@pytest.fixture
def raw_cards() -> dict[str, dict[str, Any]]:
    """Three cards keyed by cid, deliberately out of order."""
    return {
        "4007": card_json(
            4007,
            89631139,
            cn_name="青眼白龙",
            sc_name="青眼白龙",
            jp_name="青眼の白龍",
            en_name="Blue-Eyes White Dragon",
            text={
                "types": "[怪兽|通常] 龙/光\n[★8] 3000/2500",
                "desc": "以高攻击力著称的传说之龙。",
            },
            data={
                "ot": 3,
                "setcode": 0xDD,
                "type": 0x11,
                "atk": 3000,
                "def": 2500,
                "level": 8,
                "race": 0x2000,
                "attribute": 0x10,
            },
        ),
        "4041": card_json(
            4041,
            46986414,
            cn_name="黑魔术师",
            en_name="Dark Magician",
            text={"types": "[怪兽|通常] 魔法师/暗\n[★7] 2500/2100", "desc": "魔法师中攻守最强。"},
            data={"ot": 3, "type": 0x11, "atk": 2500, "def": 2100, "race": 0x2, "attribute": 0x20},
        ),
        "1234": card_json(
            1234,
            55144522,
            cn_name="强欲之壶",
            md_name="强欲之壶",
            en_name="Pot of Greed",
            text={"types": "[魔法]", "desc": "从卡组抽2张卡。"},
            data={"ot": 3, "type": 0x2},
        ),
    }


@pytest.fixture
def cards_payload(raw_cards: dict[str, dict[str, Any]]) -> bytes:
    return json.dumps(raw_cards, ensure_ascii=False).encode("utf-8")


@pytest.fixture
def sample_cards(raw_cards: dict[str, dict[str, Any]]) -> list[Card]:
    """The raw cards as models, in cid order."""
    cards = [Card.model_validate(value) for value in raw_cards.values()]
    return sorted(cards, key=lambda card: card.cid)


@pytest.fixture
def cards_archive(cards_payload: bytes) -> bytes:
    return build_zip({"cards.json": cards_payload})


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes("PNG")


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def make_image():
    return image_bytes
