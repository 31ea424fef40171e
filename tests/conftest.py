import pytest
import pytest_asyncio
from httpx import AsyncClient

from restdocs.config import UriConfig
from restdocs.test_client import create_test_client
from tests.helpers import EchoApp


@pytest.fixture
def uri_config() -> UriConfig:
    return UriConfig(scheme="https", host="api.example.com", port=443)


@pytest.fixture
def echo_app() -> EchoApp:
    return EchoApp()


@pytest_asyncio.fixture
async def client(echo_app: EchoApp) -> AsyncClient:
    async with create_test_client(echo_app) as c:
        yield c
