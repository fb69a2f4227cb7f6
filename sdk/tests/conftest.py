import pytest
import pytest_asyncio

from spyke_client.api_client import ApiClient
from spyke_client.config import Settings
from spyke_client.sinks import RecordingSink
from spyke_client.storage import LocalStorage

API_URL = "https://api.spyke.test"


@pytest.fixture
def settings() -> Settings:
    return Settings(api_url=API_URL, batch_size=3, batch_interval=60, max_stored_events=5)


@pytest.fixture
def storage() -> LocalStorage:
    store = LocalStorage()
    yield store
    store.close()


@pytest.fixture
def redirects() -> list:
    return []


@pytest_asyncio.fixture
async def client(settings, storage, redirects):
    api = ApiClient(settings, storage, on_unauthorized=redirects.append)
    yield api
    await api.aclose()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
