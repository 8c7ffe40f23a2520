import asyncio

import httpx
import pytest

from cdn_gateway.core.errors import ApiError
from cdn_gateway.services.authorization import DELETE, UPLOAD, AllowAllAuthorizer
from cdn_gateway.services.gateway import ObjectGateway, decode_base64, split_data_url
from cdn_gateway.services.remote import RemoteFetcher

BASE = "https://cdn.example.com"


class DenyingAuthorizer:
    def __init__(self, denied: set[str]) -> None:
        self.denied = denied
        self.calls: list[tuple[str, str]] = []

    def authorize(self, operation: str, key: str) -> bool:
        self.calls.append((operation, key))
        return operation not in self.denied


def _gateway(store, capabilities, **kwargs) -> ObjectGateway:
    return ObjectGateway(store=store, capabilities=capabilities, **kwargs)


def test_split_data_url():
    assert split_data_url("data:image/gif;base64,R0lG", None) == ("R0lG", "image/gif")
    assert split_data_url("R0lG", "image/avif") == ("R0lG", "image/avif")
    assert split_data_url("R0lG", None) == ("R0lG", "image/png")


def test_decode_base64_ignores_whitespace():
    assert decode_base64("QUJD\nREVG") == b"ABCDEF"


def test_decode_base64_rejects_invalid():
    with pytest.raises(ApiError) as excinfo:
        decode_base64("***")
    assert excinfo.value.status_code == 400


def test_allow_all_authorizer():
    assert AllowAllAuthorizer().authorize(DELETE, "any/key")


def test_upload_denied_by_authorizer(store, capabilities):
    authorizer = DenyingAuthorizer({UPLOAD})
    gateway = _gateway(store, capabilities, authorizer=authorizer)

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(gateway.upload_base64("QUJD", filename="a.png", folder=None, content_type=None, base_url=BASE))
    assert excinfo.value.status_code == 403
    assert authorizer.calls == [(UPLOAD, "uploads/a.png")]
    assert len(store) == 0


def test_delete_denied_by_authorizer(store, capabilities):
    gateway = _gateway(store, capabilities, authorizer=DenyingAuthorizer({DELETE}))
    asyncio.run(store.put("uploads/a.png", b"x", "image/png"))

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(gateway.delete("uploads/a.png"))
    assert excinfo.value.status_code == 403
    assert asyncio.run(store.head("uploads/a.png")) is not None


def test_signed_url_ttl_cap(store, capabilities):
    gateway = _gateway(store, capabilities, max_temp_url_ttl_seconds=600)
    asyncio.run(store.put("uploads/a.png", b"x", "image/png"))

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(gateway.get_signed_url("uploads/a.png", 601, BASE))
    assert excinfo.value.status_code == 400

    result = asyncio.run(gateway.get_signed_url("uploads/a.png", 600, BASE))
    assert result["expires_in"] == 600


def test_signed_url_without_cap_accepts_long_ttl(store, capabilities, clock):
    gateway = _gateway(store, capabilities)
    asyncio.run(store.put("uploads/a.png", b"x", "image/png"))
    ten_years = 10 * 365 * 24 * 3600
    result = asyncio.run(gateway.get_signed_url("uploads/a.png", ten_years, BASE))
    assert f"expires={clock.now + ten_years}&" in result["temp_url"]


def test_remote_fetch_size_cap():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"content-type": "image/png"}, content=b"x" * 2048)

    fetcher = RemoteFetcher(max_bytes=1024, transport=httpx.MockTransport(handler))
    with pytest.raises(ApiError) as excinfo:
        asyncio.run(fetcher.fetch("https://img.example.com/big.png"))
    assert excinfo.value.status_code == 400
    assert "exceeds 1024 bytes" in excinfo.value.message


def test_remote_fetch_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    fetcher = RemoteFetcher(timeout_seconds=0.1, transport=httpx.MockTransport(handler))
    with pytest.raises(ApiError) as excinfo:
        asyncio.run(fetcher.fetch("https://img.example.com/slow.png"))
    assert excinfo.value.message == "Failed to fetch: timed out"


def test_remote_fetch_follows_redirects():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old.png":
            return httpx.Response(302, headers={"location": "https://img.example.com/new.png"})
        return httpx.Response(200, headers={"content-type": "image/gif"}, content=b"GIF89a")

    fetcher = RemoteFetcher(transport=httpx.MockTransport(handler))
    remote = asyncio.run(fetcher.fetch("https://img.example.com/old.png"))
    assert remote.body == b"GIF89a"
    assert remote.content_type == "image/gif"


def test_serve_short_circuits_on_matching_etag(store, capabilities):
    gateway = _gateway(store, capabilities)
    meta = asyncio.run(store.put("k.png", b"body", "image/png"))

    result = asyncio.run(gateway.serve("k.png", if_none_match=meta.etag))
    assert result.status_code == 304
    assert result.body == b""

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(gateway.serve("gone.png", if_none_match='"x"'))
    assert excinfo.value.status_code == 404


def test_upload_uses_configured_default_folder(store, capabilities):
    gateway = _gateway(store, capabilities, default_folder="media")

    result = asyncio.run(gateway.upload_base64("QUJD", filename="a.png", folder=None, content_type=None, base_url=BASE))
    assert result["key"] == "media/a.png"
    assert asyncio.run(store.head("media/a.png")) is not None

    result = asyncio.run(gateway.upload_base64("QUJD", filename="b.png", folder="covers", content_type=None, base_url=BASE))
    assert result["key"] == "covers/b.png"
