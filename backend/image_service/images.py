"""
Image payload helpers.
Parses incoming data URLs and builds outgoing ones.
"""

import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_MIME = "image/png"

DATA_URL_RE = re.compile(r"^data:(.+?);base64,(.+)$")

# Checked in order; the first substring found in the MIME type wins.
EXTENSIONS = [
    ("jpeg", "jpg"),
    ("png", "png"),
    ("webp", "webp"),
    ("gif", "gif"),
    ("bmp", "bmp"),
    ("svg", "svg"),
]


@dataclass(frozen=True)
class ParsedImage:
    mime_type: str
    base64_payload: str


@dataclass(frozen=True)
class GeneratedImage:
    mime_type: str
    base64_payload: str


def parse_data_url_or_raw(value: str) -> ParsedImage:
    """
    Split a data URL into its MIME type and base64 payload.

    Anything that is not a `data:<mime>;base64,<payload>` string is taken
    as a raw base64 payload of type image/png.
    """
    match = DATA_URL_RE.match(value or "")
    if match:
        return ParsedImage(mime_type=match.group(1), base64_payload=match.group(2))
    return ParsedImage(mime_type=DEFAULT_MIME, base64_payload=value)


def ext_from_mime(mime: Optional[str]) -> str:
    mime = (mime or "").lower()
    for needle, ext in EXTENSIONS:
        if needle in mime:
            return ext
    return "png"


def is_image_mime(mime: Optional[str]) -> bool:
    return bool(mime) and mime.startswith("image/")


def to_data_url(image: GeneratedImage) -> str:
    return f"data:{image.mime_type};base64,{image.base64_payload}"
