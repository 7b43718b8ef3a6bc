import pytest
from fastapi.testclient import TestClient

from prefscale.services.blob_store import InMemoryBlobStore
from prefscale.services.document_store import JsonDocumentStore
from prefscale.utils.config import Settings
from web.main import create_app

SECRET = "test-secret-that-is-long-enough-for-hs256-signing"
ADMIN_EMAIL = "admin@prefscale.com"
ADMIN_PASSWORD = "admin-pass-123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        jwt_secret=SECRET,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        bcrypt_rounds=4,
        data_dir=str(tmp_path / "data"),
    )


@pytest.fixture
def document_store(settings):
    return JsonDocumentStore(settings.data_dir)


@pytest.fixture
def blob_store():
    return InMemoryBlobStore()


@pytest.fixture
def client(settings, document_store, blob_store):
    app = create_app(settings, document_store=document_store, blob_store=blob_store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client):
    res = client.post("/api/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def user_headers(client):
    client.post(
        "/api/signup",
        json={"name": "Ann", "company": "Acme", "email": "ann@x.com", "password": "pw123"},
    )
    res = client.post("/api/login", json={"email": "ann@x.com", "password": "pw123"})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}
