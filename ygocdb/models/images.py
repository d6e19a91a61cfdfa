"""Card image URL construction for the image CDN."""

from enum import Enum

from ygocdb.config import settings


class ImageLanguage(str, Enum):
    """Image variant (card art language) and where the CDN keeps it."""

    YGOPRO = "ygopro"
    SC = "sc"
    JP = "jp"
    EN = "en"

    @property
    def cdn_path(self) -> str:
        if self is ImageLanguage.YGOPRO:
            return "ygopro/pics"
        return f"ygoimg/{self.value}"

    @property
    def extension(self) -> str:
        return "jpg" if self is ImageLanguage.YGOPRO else "webp"


class ImageSize(str, Enum):
    FULL = "full"
    HALF = "half"  # HD webp, width 400, quality 85
    THUMB2 = "thumb2"  # 82x120
    THUMB = "thumb"  # 44x64

    @property
    def suffix(self) -> str:
        return _SIZE_SUFFIXES[self]


_SIZE_SUFFIXES: dict[ImageSize, str] = {
    ImageSize.FULL: "",
    ImageSize.HALF: "!/format/webp/fw/400/quality/85",
    ImageSize.THUMB2: "!thumb2",
    ImageSize.THUMB: "!thumb",
}


def image_url(
    card_id: int,
    language: ImageLanguage = ImageLanguage.YGOPRO,
    size: ImageSize = ImageSize.FULL,
    base_url: str | None = None,
) -> str:
    """
    Build the CDN URL for a card image.

    Example:
        >>> image_url(89631139, size=ImageSize.THUMB2)
        'https://cdn.233.momobako.com/ygopro/pics/89631139.jpg!thumb2'
    """
    base = (base_url or settings.image_cdn_url).rstrip("/")
    return f"{base}/{language.cdn_path}/{card_id}.{language.extension}{size.suffix}"
