import httpx
import pytest

from helpers import pet_payload, unique_email
from pet_records.api_helpers import ApiClient
from pet_records.app import create_app
from pet_records.config import Settings
from pet_records.mock_api import MockApi
from pet_records.store import RecordStore
from pet_records.view_state import PetHealthStore

BASE_URL = "http://testserver/api"


# -----------------------------
# App under test (one per test)
# -----------------------------
@pytest.fixture
def app_settings(tmp_path):
    return Settings(
        env="testing",
        api_prefix="/api",
        log_path=str(tmp_path / "logs" / "api_test.log"),
        seed_data=False,
        api_base_urls=BASE_URL,
        max_retries=1,
        retry_delay=0,
    )


@pytest.fixture
def record_store():
    return RecordStore()


@pytest.fixture
def app(record_store, app_settings):
    return create_app(record_store, app_settings)


@pytest.fixture
def http(app):
    """Raw httpx client wired straight into the Flask app (no server process)."""
    with httpx.Client(transport=httpx.WSGITransport(app=app), base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def api_client(app):
    client = ApiClient(BASE_URL, max_retries=1, retry_delay=0, transport=httpx.WSGITransport(app=app))
    yield client
    client.close()


@pytest.fixture
def client_store(api_client):
    return PetHealthStore(api_client)


@pytest.fixture
def mock_api():
    return MockApi()


# -----------------------------
# Data fixtures
# -----------------------------
@pytest.fixture
def user(http):
    resp = http.post("/auth/register", json={"email": unique_email(), "password": "secret"})
    assert resp.status_code == 201, f"Failed to register. {resp.status_code}: {resp.text}"
    return resp.json()["user"]


@pytest.fixture
def pet(http, user):
    resp = http.post("/pets", json=pet_payload(user["id"]))
    assert resp.status_code == 201, f"Failed to create pet. {resp.status_code}: {resp.text}"
    return resp.json()["pet"]
