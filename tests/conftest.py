import os

import httpx
import pytest
from fastapi.testclient import TestClient
from httpx import Client

from cdn_gateway.api.deps import get_gateway
from cdn_gateway.core.security import TokenCodec
from cdn_gateway.main import app
from cdn_gateway.services.capability import CapabilityURLService
from cdn_gateway.services.gateway import ObjectGateway
from cdn_gateway.services.remote import RemoteFetcher
from cdn_gateway.services.storage.memory import InMemoryObjectStore


RUN_INTEGRATION = os.getenv("RUN_INTEGRATION") == "1"
BASE_URL = os.getenv("BASE_URL", "http://localhost:8787")

TEST_SECRET = "test-signing-secret"
START_TIME = 1_700_000_000


class FakeClock:
    def __init__(self, now: int = START_TIME) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(TEST_SECRET)


@pytest.fixture
def capabilities(codec: TokenCodec, clock: FakeClock) -> CapabilityURLService:
    return CapabilityURLService(codec, clock=clock)


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def remote_routes() -> dict[str, tuple[int, dict[str, str], bytes]]:
    """url -> (status, headers, body) served to the upload-from-URL flow."""
    return {}


@pytest.fixture
def fetcher(remote_routes) -> RemoteFetcher:
    def handler(request: httpx.Request) -> httpx.Response:
        status, headers, body = remote_routes.get(str(request.url), (404, {}, b"missing"))
        return httpx.Response(status, headers=headers, content=body)

    return RemoteFetcher(transport=httpx.MockTransport(handler))


@pytest.fixture
def gateway(store, capabilities, fetcher) -> ObjectGateway:
    return ObjectGateway(store=store, capabilities=capabilities, fetcher=fetcher)


@pytest.fixture
def client(gateway: ObjectGateway):
    app.dependency_overrides[get_gateway] = lambda: gateway
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def base_url() -> str:
    return BASE_URL


@pytest.fixture(scope="session")
def live_client(base_url: str):
    with Client(base_url=base_url, timeout=20.0) as c:
        yield c


@pytest.fixture(scope="session")
def integration_enabled() -> bool:
    return RUN_INTEGRATION
