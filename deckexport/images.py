"""Image loading for slide backgrounds and image nodes.

References may be http(s) URLs, ``data:`` URIs or filesystem paths. Fetches
are blocking and never retried. ``SlideImages`` memoizes results for a single
slide only, so a repeated reference on one slide is loaded once while other
slides and later exports load it again.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image, UnidentifiedImageError

from .errors import ImageFetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]*)*?)(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


@dataclass(frozen=True)
class FetchedImage:
    data: bytes
    content_type: str
    width_px: int = 0
    height_px: int = 0

    @property
    def aspect_ratio(self) -> float:
        if self.width_px <= 0 or self.height_px <= 0:
            return 0.0
        return self.width_px / self.height_px


class ImageFetcher:
    """Turn an image reference into verified image bytes."""

    def __init__(self, *, timeout: float = DEFAULT_TIMEOUT, base_dir: Optional[Path] = None, headers: Optional[dict] = None):
        self.timeout = timeout
        self.base_dir = Path(base_dir) if base_dir else None
        self.headers = dict(headers or {"User-Agent": "deck-export/1.0"})

    def fetch(self, ref: str) -> FetchedImage:
        ref = (ref or "").strip()
        if not ref:
            raise ImageFetchError(ref, "empty reference")

        if ref.startswith("data:"):
            data, declared = self._read_data_uri(ref)
        elif re.match(r"^https?://", ref, re.IGNORECASE):
            data, declared = self._download(ref)
        else:
            data, declared = self._read_file(ref)

        return self._verify(ref, data, declared)

    def _download(self, url: str) -> tuple[bytes, str]:
        try:
            resp = requests.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ImageFetchError(url, str(exc)) from exc

        if resp.status_code != 200:
            raise ImageFetchError(url, f"HTTP {resp.status_code}")

        content_type = (resp.headers.get("Content-Type") or "").split(";")[0].strip().lower()
        if content_type and not content_type.startswith("image/") and content_type != "application/octet-stream":
            raise ImageFetchError(url, f"unexpected content type {content_type}")
        return resp.content, content_type

    def _read_data_uri(self, ref: str) -> tuple[bytes, str]:
        m = _DATA_URI.match(ref)
        if not m:
            raise ImageFetchError(ref[:40], "malformed data URI")
        payload = m.group("data")
        try:
            if m.group("b64"):
                data = base64.b64decode(payload, validate=False)
            else:
                data = unquote_to_bytes(payload)
        except (binascii.Error, ValueError) as exc:
            raise ImageFetchError(ref[:40], f"invalid base64 payload: {exc}") from exc
        return data, (m.group("mime") or "").lower()

    def _resolve_path(self, raw: str) -> Optional[Path]:
        if raw.startswith("file://"):
            raw = raw[len("file://") :]
        p = Path(raw)
        if p.exists():
            return p
        if self.base_dir and not p.is_absolute():
            p2 = self.base_dir / raw
            if p2.exists():
                return p2
        return None

    def _read_file(self, ref: str) -> tuple[bytes, str]:
        path = self._resolve_path(ref)
        if path is None or not path.is_file():
            raise ImageFetchError(ref, "file not found")
        try:
            return path.read_bytes(), ""
        except OSError as exc:
            raise ImageFetchError(ref, str(exc)) from exc

    def _verify(self, ref: str, data: bytes, declared: str) -> FetchedImage:
        if not data:
            raise ImageFetchError(ref, "empty image data")
        try:
            with Image.open(BytesIO(data)) as im:
                width, height = im.size
                fmt = im.format or ""
        except (UnidentifiedImageError, OSError) as exc:
            raise ImageFetchError(ref, "data is not a supported image") from exc

        content_type = Image.MIME.get(fmt, "") or declared or "application/octet-stream"
        return FetchedImage(data=data, content_type=content_type, width_px=width, height_px=height)


class SlideImages:
    """Per-slide memo around an ``ImageFetcher``; failures resolve to None."""

    def __init__(self, fetcher: ImageFetcher):
        self.fetcher = fetcher
        self._cache: Dict[str, Optional[FetchedImage]] = {}

    def get(self, ref: str) -> Optional[FetchedImage]:
        if ref in self._cache:
            return self._cache[ref]
        try:
            image: Optional[FetchedImage] = self.fetcher.fetch(ref)
        except ImageFetchError as exc:
            logger.warning("%s", exc)
            image = None
        self._cache[ref] = image
        return image
