from __future__ import annotations

from io import BytesIO
from typing import Callable, Dict, Optional

import pytest
from PIL import Image

from deckexport.errors import ImageFetchError
from deckexport.images import FetchedImage


def make_png(width: int = 200, height: int = 100, color: tuple = (200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def png_bytes() -> Callable[..., bytes]:
    return make_png


class FakeFetcher:
    """Serves images from a dict; any other reference fails like an unreachable URL."""

    def __init__(self, images: Optional[Dict[str, bytes]] = None):
        self.images = dict(images or {})
        self.calls: list[str] = []

    def fetch(self, ref: str) -> FetchedImage:
        self.calls.append(ref)
        if ref not in self.images:
            raise ImageFetchError(ref, "unreachable")
        data = self.images[ref]
        with Image.open(BytesIO(data)) as im:
            width, height = im.size
        return FetchedImage(data=data, content_type="image/png", width_px=width, height_px=height)


class FakeImages:
    """Image source for the layout engine keyed by URL."""

    def __init__(self, images: Optional[Dict[str, bytes]] = None):
        self.images = dict(images or {})

    def get(self, ref: str) -> Optional[FetchedImage]:
        data = self.images.get(ref)
        if data is None:
            return None
        return FetchedImage(data=data, content_type="image/png", width_px=200, height_px=100)
