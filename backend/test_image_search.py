import pytest
import requests

from backend import image_search
from backend.errors import (
    ProviderAuthError,
    ProviderHttpError,
    ProviderNetworkError,
    ProviderRateLimitedError,
)
from backend.image_search import PexelsSearch, get_images, get_provider


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.ok = status_code < 400
        self.reason = reason
        self._payload = payload

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _photo(pid, width=1200, height=800, alt="sunset over sea"):
    return {
        "id": pid,
        "width": width,
        "height": height,
        "alt": alt,
        "src": {"original": f"o/{pid}", "large": f"l/{pid}", "small": f"s/{pid}", "tiny": f"t/{pid}"},
    }


@pytest.fixture
def fake_get(monkeypatch):
    captured = {}

    def install(response=None, exc=None):
        def get(url, params=None, headers=None, timeout=None):
            captured.update(url=url, params=params, headers=headers, timeout=timeout)
            if exc is not None:
                raise exc
            return response
        monkeypatch.setattr(image_search.requests, "get", get)
        return captured

    return install


def test_search_maps_photos_to_source_images(fake_get):
    captured = fake_get(FakeResponse(payload={"photos": [_photo(1), _photo(2, alt="")]}))
    images = PexelsSearch("key", timeout=3).search("sunset aesthetic", page=2, per_page=30)

    assert [img.identity for img in images] == ["1", "2"]
    first = images[0]
    assert (first.width, first.height) == (1200, 800)
    assert first.display_url == "l/1" and first.thumbnail_url == "s/1"
    assert first.description == "sunset over sea"
    assert images[1].description is None
    assert all(img.query == "sunset aesthetic" for img in images)

    assert captured["params"] == {"query": "sunset aesthetic", "page": 2, "per_page": 30}
    assert captured["headers"] == {"Authorization": "key"}
    assert captured["timeout"] == 3


def test_search_skips_incomplete_records(fake_get):
    broken = [_photo(3, width=0), {"id": 4, "width": 10, "height": 10, "src": {"large": "l/4"}}, {"width": 5}]
    fake_get(FakeResponse(payload={"photos": broken + [_photo(5)]}))
    assert [img.identity for img in PexelsSearch("key").search("x")] == ["5"]


def test_search_handles_missing_photos_key(fake_get):
    fake_get(FakeResponse(payload={"page": 9}))
    assert PexelsSearch("key").search("x", page=9) == []


@pytest.mark.parametrize("status,error", [
    (401, ProviderAuthError),
    (403, ProviderAuthError),
    (429, ProviderRateLimitedError),
    (500, ProviderHttpError),
    (404, ProviderHttpError),
])
def test_search_classifies_http_failures(fake_get, status, error):
    fake_get(FakeResponse(status_code=status, payload={}, reason="nope"))
    with pytest.raises(error):
        PexelsSearch("key").search("x")


def test_http_error_carries_status(fake_get):
    fake_get(FakeResponse(status_code=503, payload={}, reason="Service Unavailable"))
    with pytest.raises(ProviderHttpError) as info:
        PexelsSearch("key").search("x")
    assert info.value.status == 503
    assert info.value.to_dict()["details"]["status"] == 503


@pytest.mark.parametrize("exc", [requests.exceptions.ConnectionError("down"), requests.exceptions.Timeout("slow")])
def test_search_classifies_transport_failures(fake_get, exc):
    fake_get(exc=exc)
    with pytest.raises(ProviderNetworkError):
        PexelsSearch("key").search("x")


def test_unreadable_body_is_http_error(fake_get):
    fake_get(FakeResponse(payload=ValueError("not json")))
    with pytest.raises(ProviderHttpError):
        PexelsSearch("key").search("x")


@pytest.mark.parametrize("payload", [[1, 2], "photos", None])
def test_non_object_body_is_http_error(fake_get, payload):
    fake_get(FakeResponse(payload=payload))
    with pytest.raises(ProviderHttpError) as info:
        PexelsSearch("key").search("x")
    assert info.value.status == 200


def test_missing_key_is_unauthorized(monkeypatch):
    monkeypatch.delenv("PEXELS_API", raising=False)
    with pytest.raises(ProviderAuthError):
        get_provider()
    with pytest.raises(ProviderAuthError):
        PexelsSearch("")


def test_provider_reads_environment(monkeypatch):
    monkeypatch.setenv("PEXELS_API", "secret")
    monkeypatch.setenv("PEXELS_TIMEOUT", "4.5")
    provider = get_provider()
    assert provider.headers == {"Authorization": "secret"}
    assert provider.timeout == 4.5


def test_get_images_returns_preview_urls(provider_factory, image_factory):
    provider = provider_factory(catalog={"beach": [image_factory(f"b{i}") for i in range(15)]})
    urls = get_images("beach", provider=provider)
    assert len(urls) == 10
    assert urls[0] == "https://images.example/b0/large.jpg"
    assert provider.calls == [("beach", 1, 10)]
