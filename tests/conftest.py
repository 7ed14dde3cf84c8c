import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medstock.core.cache import InventoryCache, get_cache
from medstock.core.email import EmailTransport, get_email_transport
from medstock.database import Base, get_db
from medstock.main import app
from medstock.services.object_storage import ObjectStorage, get_object_storage
from medstock.services.storage import InventoryStorage


class FakeTransport(EmailTransport):
    name = "fake"

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, message):
        if self.fail:
            return False
        self.sent.append(message)
        return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def inventory_cache():
    return InventoryCache()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def object_storage(tmp_path):
    return ObjectStorage(root=str(tmp_path), secret="test-secret", expire_seconds=60)


@pytest.fixture
def storage(session_factory, inventory_cache):
    db = session_factory()
    yield InventoryStorage(db, inventory_cache, uniqueness="drawer")
    db.close()


@pytest.fixture
def client(session_factory, inventory_cache, transport, object_storage):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: inventory_cache
    app.dependency_overrides[get_email_transport] = lambda: transport
    app.dependency_overrides[get_object_storage] = lambda: object_storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def post_a(client):
    response = client.post("/api/ambulance-posts", json={"id": "post-a", "name": "Post A"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def cabinet_1(client):
    response = client.post(
        "/api/cabinets",
        json={"id": "CAB1", "name": "Cabinet 1", "abbreviation": "c1"},
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def bandage(client, post_a, cabinet_1):
    response = client.post(
        "/api/medical-items",
        json={
            "name": "Bandage",
            "category": "Wound Care",
            "locations": [{"ambulancePostId": "post-a", "cabinetId": "CAB1"}],
        },
    )
    assert response.status_code == 201
    item = response.json()

    locations = client.get(f"/api/item-locations/{item['id']}").json()
    assert len(locations) == 1
    return {"item": item, "location": locations[0]}


@pytest.fixture
def contact(client, post_a):
    response = client.post(
        "/api/post-contacts",
        json={
            "ambulancePostId": "post-a",
            "name": "Jan de Vries",
            "email": "jan@example.org",
        },
    )
    assert response.status_code == 201
    return response.json()
