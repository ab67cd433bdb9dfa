"""Image asset loading for validation and rendering."""

import asyncio
import base64
import io
import logging
from pathlib import Path
from typing import Dict, Iterable, Tuple, Union

import requests
from PIL import Image

from .constants import ASSET_FETCH_TIMEOUT
from .errors import AssetFetchError

logger = logging.getLogger(__name__)


def fetch_image_bytes(url: str, timeout: float = ASSET_FETCH_TIMEOUT) -> bytes:
    """
    Load raw image bytes from an http(s) URL, a ``data:`` URI or a local path.

    Raises:
        AssetFetchError: If the asset cannot be read
    """
    if not url:
        raise AssetFetchError(url, "empty URL")

    if url.startswith("data:"):
        try:
            header, encoded = url.split(",", 1)
            if ";base64" not in header:
                raise ValueError("only base64 data URIs are supported")
            return base64.b64decode(encoded)
        except ValueError as e:
            raise AssetFetchError(url[:40], str(e)) from e

    if url.startswith(("http://", "https://")):
        try:
            resp = requests.get(url, timeout=timeout)
        except requests.RequestException as e:
            raise AssetFetchError(url, str(e)) from e
        if resp.status_code != 200:
            raise AssetFetchError(url, f"HTTP {resp.status_code}")
        return resp.content

    path = Path(url[len("file://"):] if url.startswith("file://") else url)
    try:
        return path.read_bytes()
    except OSError as e:
        raise AssetFetchError(url, str(e)) from e


async def fetch_image_bytes_async(url: str, timeout: float = ASSET_FETCH_TIMEOUT) -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fetch_image_bytes, url, timeout)


def open_image(data: Union[bytes, Image.Image]) -> Image.Image:
    """Decode image bytes into an RGB(A) PIL image."""
    if isinstance(data, Image.Image):
        return data
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (OSError, ValueError) as e:
        raise AssetFetchError("<bytes>", f"not a readable image: {e}") from e
    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
    return img


def probe_dimensions(url: str, timeout: float = ASSET_FETCH_TIMEOUT) -> Tuple[int, int]:
    """Pixel size (width, height) of the image at ``url``."""
    img = open_image(fetch_image_bytes(url, timeout))
    return img.size


async def prefetch_images(urls: Iterable[str], timeout: float = ASSET_FETCH_TIMEOUT,
                          max_concurrency: int = 8) -> Dict[str, Union[bytes, AssetFetchError]]:
    """
    Fetch several images concurrently.

    Failures are returned in place of the bytes so callers can fall back per
    image instead of aborting.
    """
    unique = list(dict.fromkeys(u for u in urls if u))
    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def fetch(url: str):
        async with semaphore:
            try:
                return await fetch_image_bytes_async(url, timeout)
            except AssetFetchError as e:
                logger.warning(str(e))
                return e

    results = await asyncio.gather(*(fetch(u) for u in unique))
    return dict(zip(unique, results))
