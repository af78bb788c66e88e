import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from backend.constants import *
from backend.errors import (
    ProviderAuthError,
    ProviderHttpError,
    ProviderNetworkError,
    ProviderRateLimitedError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceImage:
    identity: str
    width: int
    height: int
    display_url: str
    thumbnail_url: str
    description: Optional[str] = None
    query: str = ""


class PexelsSearch:
    """Paginated keyword search against the Pexels photo API."""

    def __init__(self, api_key: str, timeout: float = PEXELS_TIMEOUT, url: str = PEXELS_SEARCH_URL):
        if not api_key:
            raise ProviderAuthError("Pexels API key is missing, set PEXELS_API")
        self.headers = {"Authorization": api_key}
        self.timeout = timeout
        self.url = url

    def search(self, query: str, page: int = 1, per_page: int = PAGE_SIZE) -> List[SourceImage]:
        params = {"query": query, "page": page, "per_page": per_page}
        try:
            response = requests.get(self.url, params=params, headers=self.headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ProviderNetworkError(f"Pexels unreachable: {e}", details={"query": query, "page": page}) from e

        status = response.status_code
        if status in (401, 403):
            raise ProviderAuthError("Pexels rejected the API key", details={"status": status})
        if status == 429:
            raise ProviderRateLimitedError("Pexels rate limit reached", details={"query": query, "page": page})
        if not response.ok:
            raise ProviderHttpError(f"Pexels API error: {response.reason}", status=status,
                                    details={"query": query, "page": page})
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderHttpError("Pexels returned an unreadable body", status=status) from e
        if not isinstance(data, dict):
            raise ProviderHttpError("Pexels returned an unexpected body", status=status,
                                    details={"query": query, "page": page})

        photos = data.get("photos") or []
        images = [img for img in (_to_source_image(p, query) for p in photos) if img is not None]
        logger.debug("Pexels %r page %d: %d photos, %d usable", query, page, len(photos), len(images))
        return images


def _to_source_image(photo: Dict[str, Any], query: str) -> Optional[SourceImage]:
    src = photo.get("src") or {}
    identity = photo.get("id")
    width, height = photo.get("width") or 0, photo.get("height") or 0
    display_url, thumbnail_url = src.get("large"), src.get("small")
    if identity is None or width <= 0 or height <= 0 or not display_url or not thumbnail_url:
        logger.debug("Skipping incomplete Pexels record %r", identity)
        return None
    return SourceImage(
        identity=str(identity),
        width=int(width),
        height=int(height),
        display_url=display_url,
        thumbnail_url=thumbnail_url,
        description=photo.get("alt") or None,
        query=query,
    )


def get_provider() -> PexelsSearch:
    return PexelsSearch(os.getenv("PEXELS_API"), timeout=float(os.getenv("PEXELS_TIMEOUT", PEXELS_TIMEOUT)))


def get_images(query: str, provider=None) -> List[str]:
    provider = provider or get_provider()
    photos = provider.search(query, page=1, per_page=PREVIEW_COUNT)
    return [photo.display_url for photo in photos]
