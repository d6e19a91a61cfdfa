"""
Bitmask and enum constants for the numeric card data block.

Values match the YGOPro card database encoding.
"""

from enum import IntEnum, IntFlag


class CardType(IntFlag):
    """Card type bitmask (``data.type``)."""

    MONSTER = 0x1
    SPELL = 0x2
    TRAP = 0x4

    # Monster subtypes
    NORMAL = 0x10
    EFFECT = 0x20
    FUSION = 0x40
    RITUAL = 0x80
    TRAP_MONSTER = 0x100
    SPIRIT = 0x200
    UNION = 0x400
    DUAL = 0x800
    TUNER = 0x1000
    SYNCHRO = 0x2000
    TOKEN = 0x4000
    QUICK_EFFECT = 0x8000
    FLIP = 0x200000
    TOON = 0x400000
    XYZ = 0x800000
    PENDULUM = 0x1000000
    SPSUMMON = 0x2000000
    LINK = 0x4000000

    # Spell/trap subtypes
    QUICK_PLAY = 0x10000
    CONTINUOUS = 0x20000
    EQUIP = 0x40000
    FIELD = 0x80000
    COUNTER = 0x100000

    @property
    def is_monster(self) -> bool:
        return bool(self & CardType.MONSTER)

    @property
    def is_spell(self) -> bool:
        return bool(self & CardType.SPELL)

    @property
    def is_trap(self) -> bool:
        return bool(self & CardType.TRAP)

    @property
    def display_name(self) -> str:
        return "/".join(name for flag, name in _TYPE_NAMES if self & flag)


_TYPE_NAMES: tuple[tuple[CardType, str], ...] = (
    (CardType.MONSTER, "怪兽"),
    (CardType.SPELL, "魔法"),
    (CardType.TRAP, "陷阱"),
    (CardType.NORMAL, "通常"),
    (CardType.EFFECT, "效果"),
    (CardType.FUSION, "融合"),
    (CardType.RITUAL, "仪式"),
    (CardType.SYNCHRO, "同调"),
    (CardType.XYZ, "超量"),
    (CardType.PENDULUM, "灵摆"),
    (CardType.LINK, "链接"),
    (CardType.TUNER, "调整"),
    (CardType.SPIRIT, "灵魂"),
    (CardType.UNION, "同盟"),
    (CardType.DUAL, "二重"),
    (CardType.FLIP, "反转"),
    (CardType.TOON, "卡通"),
    (CardType.SPSUMMON, "特殊召唤"),
    (CardType.QUICK_PLAY, "速攻"),
    (CardType.CONTINUOUS, "永续"),
    (CardType.EQUIP, "装备"),
    (CardType.FIELD, "场地"),
    (CardType.COUNTER, "反击"),
)


class CardRace(IntEnum):
    """Monster race (``data.race``)."""

    WARRIOR = 0x1
    SPELLCASTER = 0x2
    FAIRY = 0x4
    FIEND = 0x8
    ZOMBIE = 0x10
    MACHINE = 0x20
    AQUA = 0x40
    PYRO = 0x80
    ROCK = 0x100
    WIND_BEAST = 0x200
    PLANT = 0x400
    INSECT = 0x800
    THUNDER = 0x1000
    DRAGON = 0x2000
    BEAST = 0x4000
    BEAST_WARRIOR = 0x8000
    DINOSAUR = 0x10000
    FISH = 0x20000
    SEA_SERPENT = 0x40000
    REPTILE = 0x80000
    PSYCHIC = 0x100000
    DIVINE = 0x200000
    CREATOR_GOD = 0x400000
    WYRM = 0x800000
    CYBERSE = 0x1000000
    ILLUSION = 0x2000000

    @classmethod
    def from_value(cls, value: int | None) -> "CardRace | None":
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return _RACE_NAMES[self]


_RACE_NAMES: dict[CardRace, str] = {
    CardRace.WARRIOR: "战士",
    CardRace.SPELLCASTER: "魔法师",
    CardRace.FAIRY: "天使",
    CardRace.FIEND: "恶魔",
    CardRace.ZOMBIE: "不死",
    CardRace.MACHINE: "机械",
    CardRace.AQUA: "水",
    CardRace.PYRO: "炎",
    CardRace.ROCK: "岩石",
    CardRace.WIND_BEAST: "鸟兽",
    CardRace.PLANT: "植物",
    CardRace.INSECT: "昆虫",
    CardRace.THUNDER: "雷",
    CardRace.DRAGON: "龙",
    CardRace.BEAST: "兽",
    CardRace.BEAST_WARRIOR: "兽战士",
    CardRace.DINOSAUR: "恐龙",
    CardRace.FISH: "鱼",
    CardRace.SEA_SERPENT: "海龙",
    CardRace.REPTILE: "爬虫",
    CardRace.PSYCHIC: "念动力",
    CardRace.DIVINE: "幻神兽",
    CardRace.CREATOR_GOD: "创造神",
    CardRace.WYRM: "幻龙",
    CardRace.CYBERSE: "电子界",
    CardRace.ILLUSION: "幻想魔",
}


class CardAttribute(IntEnum):
    """Monster attribute (``data.attribute``)."""

    EARTH = 0x01
    WATER = 0x02
    FIRE = 0x04
    WIND = 0x08
    LIGHT = 0x10
    DARK = 0x20
    DIVINE = 0x40

    @classmethod
    def from_value(cls, value: int | None) -> "CardAttribute | None":
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @property
    def display_name(self) -> str:
        return _ATTRIBUTE_NAMES[self]


_ATTRIBUTE_NAMES: dict[CardAttribute, str] = {
    CardAttribute.EARTH: "地",
    CardAttribute.WATER: "水",
    CardAttribute.FIRE: "炎",
    CardAttribute.WIND: "风",
    CardAttribute.LIGHT: "光",
    CardAttribute.DARK: "暗",
    CardAttribute.DIVINE: "神",
}


class CardOT(IntFlag):
    """Release region bitmask (``data.ot``)."""

    OCG = 0x1
    TCG = 0x2
    MD = 0x8

    @property
    def display_name(self) -> str:
        regions = ((CardOT.OCG, "OCG"), (CardOT.TCG, "TCG"), (CardOT.MD, "MD"))
        return "/".join(name for flag, name in regions if self & flag)
