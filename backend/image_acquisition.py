"""
Multi-keyword image acquisition.

Turns one main keyword plus optional secondary keywords into a shuffled, deduplicated set of
provider images: the required count is split into per-keyword quotas, each keyword pages through
a handful of query variations, any shortfall is spread over the keywords that produced results,
and text/quote imagery is capped so photographs make up most of the board.
"""
import math
import random
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Set

from backend.constants import *
from backend.errors import InvalidInputError, ProviderError
from backend.image_search import SourceImage, get_provider

logger = logging.getLogger(__name__)


@dataclass
class KeywordQuota:
    keyword: str
    quota: int
    images: List[SourceImage] = field(default_factory=list)
    seen: Set[str] = field(default_factory=set)
    next_page: Dict[str, int] = field(default_factory=dict)
    exhausted: Set[str] = field(default_factory=set)
    error: Optional[ProviderError] = None

    @property
    def remaining(self) -> int:
        return max(0, self.quota - len(self.images))

    def queries(self) -> List[str]:
        return [variation.format(keyword=self.keyword) for variation in QUERY_VARIATIONS]

    def has_more(self) -> bool:
        return any(query not in self.exhausted for query in self.queries())


def is_text_based(query: str) -> bool:
    """Quote/typography imagery is recognised from the query that found it, not from pixels."""
    query = (query or "").lower()
    return any(marker in query for marker in TEXT_MARKERS)


def merge_keywords(main_keyword: str, sub_keywords: Iterable[str] = ()) -> List[str]:
    main = (main_keyword or "").strip()
    if not main:
        raise InvalidInputError("Please enter a main keyword")
    keywords, seen = [main], {main.lower()}
    for keyword in sub_keywords or ():
        keyword = (keyword or "").strip()
        if keyword and keyword.lower() not in seen:
            seen.add(keyword.lower())
            keywords.append(keyword)
    return keywords


def balance_categories(images: List[SourceImage], required_count: int, rng: random.Random) -> List[SourceImage]:
    text = [img for img in images if is_text_based(img.query)]
    photos = [img for img in images if not is_text_based(img.query)]
    rng.shuffle(text)
    rng.shuffle(photos)

    text_cap = math.floor(round(required_count * TEXT_MAX_FRACTION, 6))
    chosen = text[:text_cap]
    chosen += photos[:max(0, required_count - len(chosen))]
    rng.shuffle(chosen)
    logger.debug("Balanced %d text + %d photo images (cap %d text)", min(len(text), text_cap),
                 len(chosen) - min(len(text), text_cap), text_cap)
    return chosen


class ImageAcquisition:
    def __init__(self, provider=None, rng: Optional[random.Random] = None,
                 page_size: int = PAGE_SIZE, max_pages: int = MAX_PAGES, workers: int = KEYWORD_WORKERS):
        self.provider = provider
        self.rng = rng or random.Random()
        self.page_size = page_size
        self.max_pages = max_pages
        self.workers = workers

    def acquire(self, main_keyword: str, sub_keywords: Iterable[str], required_count: int) -> List[SourceImage]:
        keywords = merge_keywords(main_keyword, sub_keywords)
        if not isinstance(required_count, int) or required_count < 1:
            raise InvalidInputError("required_count must be a positive integer",
                                    details={"required_count": required_count})
        if self.provider is None:
            self.provider = get_provider()

        quota = math.ceil(required_count / len(keywords))
        quotas = [KeywordQuota(keyword=k, quota=quota) for k in keywords]
        logger.info("Acquiring %d images for %s (quota %d each)", required_count, keywords, quota)
        self._fetch_all(quotas)

        merged = self._merge(quotas)
        if not merged:
            errors = [q.error for q in quotas if q.error is not None]
            if errors:
                raise errors[0]
            logger.warning("No images found for %s", keywords)
            return []

        # spread any shortfall over keywords that still have unread results, until it closes
        # or a round brings nothing new
        deficit = required_count - len(merged)
        while deficit > 0:
            productive = [q for q in quotas if q.images and q.has_more()]
            if not productive:
                break
            extra = math.ceil(deficit / len(productive))
            held = {img.identity for img in merged}
            for q in productive:
                q.seen |= held
                q.quota = len(q.images) + extra
                q.error = None
            logger.info("Short by %d, asking %d keyword(s) for %d more each", deficit, len(productive), extra)
            self._fetch_all(productive)
            grown = self._merge(quotas)
            if len(grown) == len(merged):
                break
            merged = grown
            deficit = required_count - len(merged)

        for q in quotas:
            if q.error is not None:
                logger.warning("Keyword %r degraded after %d images: %s", q.keyword, len(q.images), q.error)

        result = balance_categories(merged, required_count, self.rng)
        logger.info("Acquired %d unique images (%d requested)", len(result), required_count)
        return result

    def _fetch_all(self, quotas: List[KeywordQuota]) -> None:
        # quotas are only touched by their own worker until every future settles
        with ThreadPoolExecutor(max_workers=max(1, min(self.workers, len(quotas)))) as pool:
            futures = [(q, pool.submit(self._fetch_keyword, q)) for q in quotas]
        for q, future in futures:
            exc = future.exception()
            if exc is None:
                continue
            if not isinstance(exc, ProviderError):
                raise exc
            q.error = exc

    def _fetch_keyword(self, q: KeywordQuota) -> None:
        for query in q.queries():
            if q.remaining == 0:
                return
            if query in q.exhausted:
                continue
            try:
                self._fetch_query(q, query)
            except ProviderError as e:
                if not q.images:
                    raise
                q.error = e
                return

    def _fetch_query(self, q: KeywordQuota, query: str) -> None:
        page = q.next_page.get(query, 1)
        while q.remaining > 0:
            if page > self.max_pages:
                q.exhausted.add(query)
                return
            try:
                batch = self.provider.search(query, page=page, per_page=self.page_size)
            except ProviderError as e:
                if page == 1:
                    raise
                logger.warning("Page %d of %r failed, keeping %d images: %s", page, query, len(q.images), e)
                q.exhausted.add(query)
                return
            page += 1
            q.next_page[query] = page
            for img in batch:
                if q.remaining == 0:
                    break
                if img.identity in q.seen:
                    continue
                q.seen.add(img.identity)
                q.images.append(img if img.query == query else replace(img, query=query))
            logger.debug("%r page %d: %d results, %d/%d held", query, page - 1, len(batch), len(q.images), q.quota)
            if len(batch) < self.page_size:
                q.exhausted.add(query)
                return

    @staticmethod
    def _merge(quotas: List[KeywordQuota]) -> List[SourceImage]:
        merged, seen = [], set()
        for q in quotas:
            for img in q.images:
                if img.identity not in seen:
                    seen.add(img.identity)
                    merged.append(img)
        return merged


def acquire(main_keyword: str, sub_keywords: Iterable[str] = (), required_count: int = 1,
            provider=None, rng: Optional[random.Random] = None) -> List[SourceImage]:
    return ImageAcquisition(provider=provider, rng=rng).acquire(main_keyword, sub_keywords, required_count)
