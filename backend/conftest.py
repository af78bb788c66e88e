"""Shared fakes for the board tests."""

from __future__ import annotations

import pytest

from backend.image_search import SourceImage


def make_image(identity: str, width: int = 400, height: int = 300, query: str = "") -> SourceImage:
    return SourceImage(
        identity=identity,
        width=width,
        height=height,
        display_url=f"https://images.example/{identity}/large.jpg",
        thumbnail_url=f"https://images.example/{identity}/small.jpg",
        query=query,
    )


class FakeProvider:
    """
    In-memory search provider.

    `catalog` maps a query string to its full ordered result list; queries not in the
    catalog get `default_total` synthetic images, unless `default_total` is 0.
    `failures` maps (query, page) to the exception that page raises.
    """

    def __init__(self, catalog=None, failures=None, default_total=0):
        self.catalog = catalog or {}
        self.failures = failures or {}
        self.default_total = default_total
        self.calls = []

    def _results(self, query):
        if query in self.catalog:
            return self.catalog[query]
        return [make_image(f"{query}-{i}") for i in range(self.default_total)]

    def search(self, query, page=1, per_page=30):
        self.calls.append((query, page, per_page))
        exc = self.failures.get((query, page))
        if exc is not None:
            raise exc
        start = (page - 1) * per_page
        return self._results(query)[start:start + per_page]

    def queries_called(self):
        return [query for query, _, _ in self.calls]


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def source_images():
    def build(count, width=400, height=300):
        return [make_image(f"img{i}", width, height) for i in range(count)]
    return build


@pytest.fixture
def provider_factory():
    return FakeProvider
