"""
Card record model.

Matches the JSON structure of ygocdb's ``cards.json``: a mapping of the
official database id (``cid``) to a card object. Cards are immutable once
constructed and are replaced wholesale on every dataset sync.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ygocdb.models.constants import CardAttribute, CardOT, CardRace, CardType

UNKNOWN_CARD_NAME = "未知卡片"

# ATK/DEF value used by the dataset for "?"
VARIABLE_STAT = -2


class CardText(BaseModel):
    """Card text block."""

    model_config = ConfigDict(frozen=True)

    types: str | None = None  # e.g. "[怪兽|效果] 龙/暗\n[★7] 2500/2000"
    pdesc: str | None = None  # pendulum effect
    desc: str | None = None


class CardData(BaseModel):
    """Numeric card data block. Every field may be absent."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ot: int | None = None
    setcode: int | None = None
    type: int | None = None
    atk: int | None = None
    def_: int | None = Field(default=None, alias="def")
    level: int | None = None
    race: int | None = None
    attribute: int | None = None

    @property
    def is_monster(self) -> bool:
        return CardType(self.type or 0).is_monster

    @property
    def is_spell(self) -> bool:
        return CardType(self.type or 0).is_spell

    @property
    def is_trap(self) -> bool:
        return CardType(self.type or 0).is_trap

    @property
    def atk_text(self) -> str:
        return _stat_text(self.atk)

    @property
    def def_text(self) -> str:
        return _stat_text(self.def_)


def _stat_text(value: int | None) -> str:
    if value is None:
        return "-"
    return "?" if value == VARIABLE_STAT else str(value)


class Card(BaseModel):
    """
    One card record.

    Attributes:
        cid: Official database id, unique within a dataset snapshot
        id: Card password, used for display, images and id search
        cn_name: YGOPro Chinese name
        sc_name: Official simplified Chinese name
        md_name: Master Duel Chinese name
        nwbbs_n: NWBBS translation
        cnocg_n: CNOCG translation
        jp_ruby: Japanese reading
        jp_name: Japanese name
        en_name: English name
        text: Optional text block
        data: Optional numeric block
    """

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

    @property
    def names(self) -> tuple[str | None, ...]:
        """Every localized name field, in search order."""
        return (
            self.cn_name,
            self.sc_name,
            self.md_name,
            self.nwbbs_n,
            self.cnocg_n,
            self.jp_name,
            self.jp_ruby,
            self.en_name,
        )

    @property
    def display_name(self) -> str:
        return NameSource.YGOPRO.resolve(self)

    @property
    def types_display(self) -> str:
        return (self.text.types if self.text else None) or ""

    @property
    def desc_display(self) -> str:
        return (self.text.desc if self.text else None) or ""

    @property
    def pdesc_display(self) -> str:
        return (self.text.pdesc if self.text else None) or ""

    @property
    def card_type(self) -> CardType:
        return CardType((self.data.type if self.data else None) or 0)

    @property
    def card_race(self) -> CardRace | None:
        race = self.data.race if self.data else None
        return CardRace.from_value(race)

    @property
    def card_attribute(self) -> CardAttribute | None:
        attribute = self.data.attribute if self.data else None
        return CardAttribute.from_value(attribute)

    @property
    def card_ot(self) -> CardOT:
        return CardOT((self.data.ot if self.data else None) or 0)


class NameSource(str, Enum):
    """Which translation to show, with its fallback order."""

    YGOPRO = "ygopro"
    SC = "sc"
    MASTER_DUEL = "master_duel"
    NWBBS = "nwbbs"
    CNOCG = "cnocg"

    def resolve(self, card: Card) -> str:
        """First present name in this source's fallback order."""
        for field in _NAME_FALLBACKS[self]:
            value = getattr(card, field)
            if value:
                return value
        return UNKNOWN_CARD_NAME


_NAME_FALLBACKS: dict[NameSource, tuple[str, ...]] = {
    NameSource.YGOPRO: ("cn_name", "sc_name", "jp_name", "en_name"),
    NameSource.SC: ("sc_name", "cn_name", "jp_name"),
    NameSource.MASTER_DUEL: ("md_name", "sc_name", "cn_name"),
    NameSource.NWBBS: ("nwbbs_n", "cn_name", "jp_name"),
    NameSource.CNOCG: ("cnocg_n", "cn_name", "jp_name"),
}
