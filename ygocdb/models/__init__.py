from ygocdb.models.card import Card, CardData, CardText, NameSource
from ygocdb.models.card_detail import CardAvailability, CardFullDetail, CardPack, CardQA
from ygocdb.models.constants import CardAttribute, CardOT, CardRace, CardType
from ygocdb.models.dataset import DatasetManifest, FetchResult
from ygocdb.models.images import ImageLanguage, ImageSize, image_url
from ygocdb.models.pre_release import PreReleaseCard

__all__ = [
    "Card",
    "CardAttribute",
    "CardAvailability",
    "CardData",
    "CardFullDetail",
    "CardOT",
    "CardPack",
    "CardQA",
    "CardRace",
    "CardText",
    "CardType",
    "DatasetManifest",
    "FetchResult",
    "ImageLanguage",
    "ImageSize",
    "NameSource",
    "PreReleaseCard",
    "image_url",
]
