from __future__ import annotations

import re

DOMAIN_PATTERN = re.compile(r"^[a-z0-9-]+\.[a-z0-9.-]+$")
INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

IMAGE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/pjpeg": ".jpg",
    "image/webp": ".webp",
}


def sanitize_filename(name: str) -> str:
    return INVALID_FILENAME_CHARS.sub("_", name)


def derive_base_name(identifier: str) -> str:
    # "carrefour.com" -> "carrefour"; tickers, ISINs and brand ids stay whole
    name = identifier.lower()
    if DOMAIN_PATTERN.match(name):
        name = name.split(".", 1)[0]
    return sanitize_filename(name)


def _media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def choose_extension(is_svg: bool, content_type: str | None) -> str:
    if is_svg:
        return ".svg"
    media_type = _media_type(content_type)
    if media_type in IMAGE_EXTENSIONS:
        return IMAGE_EXTENSIONS[media_type]
    if media_type.startswith("image/"):
        return ".img"
    return ".bin"
