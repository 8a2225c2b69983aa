from typing import AsyncIterator, Iterator

import pytest
from fastapi.testclient import TestClient
from ivbooking.deps import get_session
from ivbooking.main import app


class DummySession:
    pass


async def override_get_session() -> AsyncIterator[DummySession]:
    yield DummySession()


@pytest.fixture
def client() -> Iterator[TestClient]:
    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_invalid_fluid_option_returns_400(client: TestClient) -> None:
    res = client.post(
        "/availability",
        json={
            "locationId": "table_bay",
            "date": "2025-05-10",
            "attendees": [{"treatmentId": 15, "fluidOption": "500ml"}],
        },
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid input data"


def test_empty_attendee_list_returns_400(client: TestClient) -> None:
    res = client.post("/availability", json={"locationId": "table_bay", "date": "2025-05-10", "attendees": []})
    assert res.status_code == 400


def test_bad_date_query_returns_400(client: TestClient) -> None:
    res = client.get("/availability", params={"locationId": "table_bay", "date": "10/05/2025"})
    assert res.status_code == 400
