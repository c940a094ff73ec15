"""
Bitmap sources for Pixel Gen.

The quantizer accepts a bitmap reference in whatever form the upstream
image source hands over: an already decoded Pillow image, raw encoded
bytes, a filesystem path, a ``data:`` URL carrying base64 data, or a
``file://`` / ``http(s)://`` URL.

Functions:
    load_bitmap: Resolve a bitmap reference into an RGBA Pillow image
    encode_data_url: Encode a Pillow image as a PNG ``data:`` URL
"""

import base64
import binascii
import io
import logging
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any
from urllib.parse import unquote, unquote_to_bytes, urlparse

from PIL import Image, UnidentifiedImageError

from PG_Libs.errors import ResamplingError

logger = logging.getLogger(__name__)

URL_TIMEOUT_SECONDS = 120


def _decode_bytes(data: bytes, origin: str) -> "Image.Image":
    try:
        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            return opened.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ResamplingError(f"Could not decode bitmap from {origin}: {e}") from e


def _decode_data_url(url: str) -> "Image.Image":
    header, sep, payload = url.partition(",")
    if not sep:
        raise ResamplingError("Malformed data URL: missing ',' separator")

    if header.endswith(";base64"):
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ResamplingError(f"Malformed base64 payload in data URL: {e}") from e
    else:
        data = unquote_to_bytes(payload)

    return _decode_bytes(data, "data URL")


def _fetch_url(url: str) -> bytes:
    try:
        with urllib.request.urlopen(url, timeout=URL_TIMEOUT_SECONDS) as resp:
            return resp.read()
    except (urllib.error.URLError, OSError, ValueError) as e:
        raise ResamplingError(f"Could not fetch bitmap from {url}: {e}") from e


def load_bitmap(source: Any) -> "Image.Image":
    """
    Resolve a bitmap reference into a decoded RGBA image.

    Args:
        source: Pillow image, encoded bytes, path, data URL or file/http(s) URL

    Returns:
        A new RGBA Pillow image

    Raises:
        ResamplingError: If the reference cannot be read or decoded
    """
    if isinstance(source, Image.Image):
        return source.convert("RGBA")

    if isinstance(source, (bytes, bytearray)):
        return _decode_bytes(bytes(source), "bytes")

    if isinstance(source, Path):
        return _load_path(source)

    if isinstance(source, str):
        if source.startswith("data:"):
            return _decode_data_url(source)

        parsed = urlparse(source)
        if parsed.scheme in ("http", "https"):
            logger.debug(f"Fetching bitmap from {source}")
            return _decode_bytes(_fetch_url(source), source)
        if parsed.scheme == "file":
            return _load_path(Path(unquote(parsed.path)))
        return _load_path(Path(source))

    raise ResamplingError(f"Unsupported bitmap source type: {type(source).__name__}")


def _load_path(path: Path) -> "Image.Image":
    if not path.is_file():
        raise ResamplingError(f"Bitmap file does not exist: {path}")
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ResamplingError(f"Could not read bitmap file {path}: {e}") from e
    return _decode_bytes(data, str(path))


def encode_data_url(image: "Image.Image") -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{payload}"
