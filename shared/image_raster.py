"""Raster image transforms for email-bound documents.

Email clients cap message size and block remote images by default, so
logos and photos are downsampled to a fixed display width and embedded
as self-contained data URIs.

Sources may be ``data:`` URIs, ``http(s)://`` URLs, ``file://`` URIs or
plain filesystem paths. A source that cannot be loaded raises
``ImageLoadError``; ``rasterize_or_fallback`` turns that into the
original, un-rasterized reference so the rest of the document still
ships.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from urllib.parse import unquote_to_bytes, urlparse
from urllib.request import url2pathname

import requests
from PIL import Image, UnidentifiedImageError

from shared.settings import get_settings

logger = logging.getLogger(__name__)

_JPEG_QUALITY = 85


class ImageLoadError(Exception):
    """The image source could not be fetched or decoded."""


@dataclass(frozen=True)
class ImageReference:
    source_uri: str
    natural_width: int
    natural_height: int


@dataclass(frozen=True)
class RasterizedImage:
    data_uri: str
    width: int
    height: int
    rasterized: bool = True


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (87.5 -> 88)."""
    return int(math.floor(value + 0.5))


def target_height_for(natural_width: int, natural_height: int, target_width: int) -> int:
    """Height that keeps the aspect ratio at *target_width*, floored at 1px."""
    scale = target_width / natural_width
    return max(1, round_half_up(natural_height * scale))


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _read_data_uri(source_uri: str) -> bytes:
    header, sep, payload = source_uri.partition(",")
    if not sep:
        raise ImageLoadError("Malformed data URI")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as exc:
            raise ImageLoadError(f"Invalid base64 image data: {exc}") from exc
    return unquote_to_bytes(payload)


def _read_url(source_uri: str, timeout: float) -> bytes:
    try:
        resp = requests.get(source_uri, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise ImageLoadError(f"Failed to fetch {source_uri}: {exc}") from exc
    return resp.content


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except (OSError, ValueError) as exc:
        raise ImageLoadError(f"Failed to read {path}: {exc}") from exc


def _read_source(source_uri: str, timeout: float) -> bytes:
    if not source_uri:
        raise ImageLoadError("Empty image source")
    if source_uri.startswith("data:"):
        return _read_data_uri(source_uri)
    scheme = urlparse(source_uri).scheme.lower()
    if scheme in ("http", "https"):
        return _read_url(source_uri, timeout)
    if scheme == "file":
        return _read_file(Path(url2pathname(urlparse(source_uri).path)))
    return _read_file(Path(source_uri))


def _decode(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ImageLoadError(f"Could not decode image: {exc}") from exc
    width, height = img.size
    if width <= 0 or height <= 0:
        raise ImageLoadError("Invalid image dimensions")
    return img


def _has_alpha(img: Image.Image) -> bool:
    if img.mode in ("RGBA", "LA", "PA"):
        return True
    return img.mode == "P" and "transparency" in img.info


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def resize(
    source_uri: str,
    target_width: int,
    *,
    timeout: float | None = None,
    image_format: str | None = None,
) -> RasterizedImage:
    """Downsample an image to *target_width* and return it as a data URI.

    JPEG is used for opaque images to keep the payload small; PNG when
    the source has transparency. Pass *image_format* ("JPEG" or "PNG")
    to force one. One attempt, no retry.
    """
    if target_width <= 0:
        raise ValueError(f"target_width must be positive, got {target_width}")
    timeout = timeout if timeout is not None else get_settings().image_timeout_seconds

    with _decode(_read_source(source_uri, timeout)) as img:
        natural_width, natural_height = img.size
        target_height = target_height_for(natural_width, natural_height, target_width)

        fmt = (image_format or ("PNG" if _has_alpha(img) else "JPEG")).upper()
        if fmt not in ("JPEG", "PNG"):
            raise ValueError(f"Unsupported output format: {fmt}")
        source = img.convert("RGB") if fmt == "JPEG" else img.convert("RGBA")
        resized = source.resize((target_width, target_height), Image.Resampling.LANCZOS)

    buf = io.BytesIO()
    if fmt == "JPEG":
        resized.save(buf, format="JPEG", quality=_JPEG_QUALITY, optimize=True)
        mime = "image/jpeg"
    else:
        resized.save(buf, format="PNG", optimize=True)
        mime = "image/png"

    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    return RasterizedImage(f"data:{mime};base64,{encoded}", target_width, target_height)


def rasterize_or_fallback(
    reference: ImageReference,
    target_width: int,
    *,
    resizer: Callable[[str, int], RasterizedImage] | None = None,
) -> RasterizedImage:
    """Resize *reference*, or pass it through unchanged if it cannot be loaded.

    *resizer* defaults to ``resize``; the fallback keeps the original URI
    and its natural dimensions.
    """
    resizer = resizer or resize
    try:
        return resizer(reference.source_uri, target_width)
    except ImageLoadError as exc:
        logger.warning("Embedding original image, raster step skipped: %s", exc)
        return RasterizedImage(
            reference.source_uri,
            reference.natural_width,
            reference.natural_height,
            rasterized=False,
        )
