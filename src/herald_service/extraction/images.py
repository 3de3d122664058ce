"""Logo and cover image discovery for business websites."""

import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from .utils import make_absolute

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
EXCLUDED_FRAGMENTS = ("logo", "icon", "favicon", "sprite")
COVER_HINTS = ("hero", "banner", "cover", "main", "large", "featured", "slide")

_BACKGROUND_RE = re.compile(r"background-image:\s*url\(['\"]?([^'\")]+)['\"]?\)", re.IGNORECASE)


@dataclass
class BusinessImages:
    logo_url: str | None = None
    cover_url: str | None = None
    all_images: list[str] = field(default_factory=list)


def _attr_text(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value).lower()
    return (value or "").lower()


def _find_logo(soup: BeautifulSoup, base_url: str) -> str | None:
    images = soup.find_all("img", src=True)
    checks = (
        lambda img: "logo" in _attr_text(img, "class"),
        lambda img: "logo" in _attr_text(img, "src"),
        lambda img: "brand" in _attr_text(img, "class"),
        lambda img: "logo" in _attr_text(img, "alt"),
    )
    for check in checks:
        for img in images:
            if check(img):
                return make_absolute(str(img["src"]), base_url)
    return None


def _is_photo(url: str, logo_url: str | None) -> bool:
    lowered = url.lower()
    if url == logo_url or any(fragment in lowered for fragment in EXCLUDED_FRAGMENTS):
        return False
    path = lowered.split("?", 1)[0]
    return path.endswith(IMAGE_EXTENSIONS)


def extract_business_images(html: str, base_url: str) -> BusinessImages:
    """Pick a logo, a cover image and all photo candidates from a homepage.

    Logo: first ``<img>`` whose class, src or alt mentions a logo/brand.
    Photos: CSS ``background-image`` URLs and ``<img>`` sources with a
    photo extension that are not the logo, icons or sprites.
    Cover: first photo hinting at a hero/banner, else the first photo,
    else the logo.

    Args:
        html: Page HTML
        base_url: Page URL for resolving relative URLs

    Returns:
        BusinessImages (URLs are absolute)
    """
    soup = BeautifulSoup(html, "html.parser")
    logo_url = _find_logo(soup, base_url)

    candidates: list[str] = []
    for match in _BACKGROUND_RE.finditer(html):
        candidates.append(make_absolute(match.group(1), base_url))
    for img in soup.find_all("img", src=True):
        candidates.append(make_absolute(str(img["src"]), base_url))

    photos: list[str] = []
    for url in candidates:
        if _is_photo(url, logo_url) and url not in photos:
            photos.append(url)

    cover_url = next(
        (url for url in photos if any(hint in url.lower() for hint in COVER_HINTS)),
        photos[0] if photos else logo_url,
    )

    return BusinessImages(logo_url=logo_url, cover_url=cover_url, all_images=photos)
