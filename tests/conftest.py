import pytest
from fastapi.testclient import TestClient

from groupledger.db.store import KeyValueStore, get_store
from groupledger.main import app
from groupledger.schemas.group import GroupCreate, MemberIn
from groupledger.services.group_services import create_group


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    return KeyValueStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def group_payload():
    return {
        "name": "Lisbon trip",
        "members": [
            {"id": "A", "display_name": "Alice"},
            {"id": "B", "display_name": "Bob"},
            {"id": "C", "display_name": "Carol"},
        ],
    }


@pytest.fixture
def group_id(client, group_payload):
    response = client.post("/api/v1/groups/", json=group_payload)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
async def trip(store, group_payload):
    """Group with members A, B and C created directly through the service layer."""
    group, _ = await create_group(store, GroupCreate(
        name=group_payload["name"],
        members=[MemberIn(**m) for m in group_payload["members"]],
    ))
    return group.id
