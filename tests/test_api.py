import pytest
from fastapi.testclient import TestClient

from courier.api.endpoints.geocoding import get_geocode_client
from courier.main import app
from courier.schemas.geocoding import GeocodeFailureKind, GeocodingResult
from courier.services.geocoding import NOT_FOUND_MESSAGE, GeocodeClient, StaticGeocoderBackend

PICKUP = {"street": "350 5th Ave", "city": "New York", "state": "NY", "zipCode": "10118"}
DROPOFF = {"street": "11 Wall St", "city": "New York", "state": "NY", "zipCode": "10005"}
UNKNOWN = {"street": "1 Elm St", "city": "Boise", "state": "ID", "zipCode": "83702"}


@pytest.fixture
def geocode_client() -> GeocodeClient:
    return GeocodeClient(StaticGeocoderBackend(), min_interval=0)


@pytest.fixture
def api(geocode_client):
    app.dependency_overrides[get_geocode_client] = lambda: geocode_client
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(api):
    response = api.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_states(api):
    states = api.get("/geocoding/states").json()
    assert len(states) == 50
    assert {"code": "NY", "name": "New York"} in states


def test_validate(api):
    ok = api.post("/geocoding/validate", json=PICKUP).json()
    assert ok == {"is_valid": True, "errors": {}}

    bad = api.post("/geocoding/validate", json={**PICKUP, "zipCode": "1234"}).json()
    assert bad["is_valid"] is False
    assert list(bad["errors"]) == ["zipCode"]


def test_geocode(api, geocode_client):
    response = api.post("/geocoding/geocode", json=PICKUP)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["coordinates"] == {"latitude": 40.748817, "longitude": -73.985428}
    assert geocode_client.get_geocode_cache_size() == 1


def test_geocode_rejects_invalid_address(api, geocode_client):
    response = api.post("/geocoding/geocode", json={**PICKUP, "street": "Fifth Avenue"})

    assert response.status_code == 422
    assert response.json()["detail"] == {"street": "Street address must include a number"}
    assert geocode_client.get_geocode_cache_size() == 0


def test_geocode_not_found(api):
    response = api.post("/geocoding/geocode", json=UNKNOWN)

    assert response.status_code == 404
    assert response.json()["detail"].startswith("Address not found")


class FixedResultClient:
    def __init__(self, result: GeocodingResult):
        self.result = result

    async def geocode_address(self, address) -> GeocodingResult:
        return self.result


def test_geocode_status_follows_failure_kind(api):
    # Same wording as a miss, but an upstream fault
    app.dependency_overrides[get_geocode_client] = lambda: FixedResultClient(
        GeocodingResult.failure(NOT_FOUND_MESSAGE, GeocodeFailureKind.SERVICE_ERROR)
    )

    response = api.post("/geocoding/geocode", json=UNKNOWN)

    assert response.status_code == 502
    assert response.json()["detail"] == NOT_FOUND_MESSAGE


def test_route_quote(api):
    response = api.post(
        "/route/quote",
        json={"pickup": PICKUP, "dropoff": DROPOFF, "weight": 2, "service_type": "SAME_DAY"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["route"]["total_miles"] > 0
    assert body["quote"]["eta"] == "Today by 8:00 PM"
    assert body["pickup"]["success"] is True


def test_route_quote_invalid_address(api):
    response = api.post(
        "/route/quote",
        json={"pickup": PICKUP, "dropoff": {**DROPOFF, "state": "DC"}, "weight": 1},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["dropoff"] == {"state": "Please select a valid US state"}


def test_route_quote_unresolvable_leg(api):
    response = api.post("/route/quote", json={"pickup": UNKNOWN, "dropoff": DROPOFF, "weight": 1})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Pickup address: ")


def test_lifespan_creates_client():
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert isinstance(app.state.geocode_client, GeocodeClient)
