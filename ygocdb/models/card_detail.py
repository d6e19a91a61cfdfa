"""
Full card detail, as returned by ``/card/{id}?show=all``.

Carries supplemental fields (FAQs, pack listings, availability) that the
bulk dataset does not include.
"""

import re

from pydantic import BaseModel, ConfigDict

from ygocdb.models.card import CardData, CardText

_TAG_PATTERN = re.compile(r"<[^>]+>")
_BREAK_PATTERN = re.compile(r"<br\s*/?>", re.IGNORECASE)


def strip_html(value: str) -> str:
    """Drop HTML tags, keeping line breaks as newlines."""
    return _TAG_PATTERN.sub("", _BREAK_PATTERN.sub("\n", value))


class CardQA(BaseModel):
    """One FAQ entry."""

    model_config = ConfigDict(frozen=True)

    fid: str
    title: str
    date: str | None = None
    question: str
    answer: str

    @property
    def clean_title(self) -> str:
        return strip_html(self.title)

    @property
    def clean_question(self) -> str:
        return strip_html(self.question)

    @property
    def clean_answer(self) -> str:
        return strip_html(self.answer)


class CardPack(BaseModel):
    """A release pack listing."""

    model_config = ConfigDict(frozen=True)

    pid: str
    name: str
    date: str
    setid: str | None = None


class CardAvailability(BaseModel):
    model_config = ConfigDict(frozen=True)

    ocg: int | None = None
    tcg: int | None = None


class CardFullDetail(BaseModel):
    """Card record plus FAQ, pack and availability data."""

    model_config = ConfigDict(frozen=True)

    cid: int
    id: int
    cn_name: str | None = None
    sc_name: str | None = None
    md_name: str | None = None
    nwbbs_n: str | None = None
    cnocg_n: str | None = None
    jp_ruby: str | None = None
    jp_name: str | None = None
    en_name: str | None = None
    text: CardText | None = None
    data: CardData | None = None
    faqs: list[CardQA] | None = None
    jppacks: list[CardPack] | None = None
    enpacks: list[CardPack] | None = None
    avail: CardAvailability | None = None

    @property
    def has_faqs(self) -> bool:
        return bool(self.faqs)

    @property
    def has_jp_packs(self) -> bool:
        return bool(self.jppacks)

    @property
    def has_en_packs(self) -> bool:
        return bool(self.enpacks)
